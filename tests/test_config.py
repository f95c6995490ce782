import dataclasses
import json
import logging

import pytest

from ascii_motion import (
    CharacterSet,
    ConfigManager,
    DitherAlgorithm,
    EdgeMethod,
    InvalidConfig,
    Presets,
    RenderConfig,
)


def test_defaults():
    config = RenderConfig()
    assert config.ascii_width == 150
    assert config.ignore_white and not config.ignore_green
    assert config.dithering
    assert config.dither_algorithm is DitherAlgorithm.FLOYD_STEINBERG
    assert config.edge_method is EdgeMethod.NONE
    assert config.gradient == CharacterSet.DETAILED
    assert config.validate() is config


def test_enum_fields_accept_strings():
    config = RenderConfig(edge_method='Canny', dither_algorithm='atkinson')
    assert config.edge_method is EdgeMethod.CANNY
    assert config.dither_algorithm is DitherAlgorithm.ATKINSON


def test_unknown_enum_value():
    with pytest.raises(InvalidConfig) as excinfo:
        RenderConfig(edge_method='laplace')
    assert excinfo.value.field == 'edge_method'


def test_config_is_immutable():
    config = RenderConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.ascii_width = 10


def test_replace_returns_validated_copy():
    config = RenderConfig()
    narrow = config.replace(ascii_width=40)
    assert narrow.ascii_width == 40
    assert config.ascii_width == 150
    with pytest.raises(InvalidConfig):
        config.replace(ascii_width=-1)


@pytest.mark.parametrize("changes, field", [
    ({'ascii_width': 0}, 'ascii_width'),
    ({'ascii_width': 12.5}, 'ascii_width'),
    ({'contrast': 259}, 'contrast'),
    ({'contrast': -256}, 'contrast'),
    ({'brightness': float('nan')}, 'brightness'),
    ({'blur': -1}, 'blur'),
    ({'charset': 'emoji'}, 'charset'),
    ({'custom_gradient': ''}, 'custom_gradient'),
    ({'charset': 'manual', 'manual_char': 'ab'}, 'manual_char'),
    ({'dog_sigma1': 0}, 'dog_sigma1'),
    ({'canny_sigma': -1.0}, 'canny_sigma'),
    ({'canny_low': -5}, 'canny_low'),
    ({'clahe_tile_size': 0}, 'clahe_tile_size'),
    ({'clahe_clip_limit': -0.5}, 'clahe_clip_limit'),
    ({'lbp_radius': 0}, 'lbp_radius'),
    ({'lbp_neighbors': 33}, 'lbp_neighbors'),
    ({'brightness': '10'}, 'brightness'),
    ({'charset': 5}, 'charset'),
    ({'clahe_tile_size': '8'}, 'clahe_tile_size'),
    ({'ascii_width': True}, 'ascii_width'),
    ({'contrast': False}, 'contrast'),
    ({'lbp_uniform': 'yes'}, 'lbp_uniform'),
    ({'custom_gradient': ['@', '.']}, 'custom_gradient'),
])
def test_validation_names_the_field(changes, field):
    with pytest.raises(InvalidConfig) as excinfo:
        RenderConfig(**changes).validate()
    assert excinfo.value.field == field


def test_contrast_lower_bound_is_inclusive():
    RenderConfig(contrast=-255).validate()
    RenderConfig(contrast=258.9).validate()


def test_charset_gradients():
    assert RenderConfig(charset='standard').gradient == "@%#*+=-:."
    assert RenderConfig(charset='manual').gradient == '0 '
    assert RenderConfig(charset='manual', manual_char='x').gradient == 'x '
    assert RenderConfig(charset='binary', custom_gradient='#.').gradient == '#.'
    assert CharacterSet.get_preset('unknown') == CharacterSet.DETAILED


def test_dict_round_trip():
    config = RenderConfig(ascii_width=80, edge_method=EdgeMethod.LBP, lbp_uniform=True)
    data = config.to_dict()
    assert data['edge_method'] == 'lbp'
    assert data['dither_algorithm'] == 'floyd'
    json.dumps(data)
    assert RenderConfig.from_dict(data) == config


def test_from_dict_ignores_unknown_keys(caplog):
    with caplog.at_level(logging.WARNING, logger='ascii_motion'):
        config = RenderConfig.from_dict({'ascii_width': 50, 'sparkle': True})
    assert config.ascii_width == 50
    assert 'sparkle' in caplog.text


def test_config_manager_round_trip(tmp_path):
    manager = ConfigManager(tmp_path / 'settings.json')
    config = RenderConfig(ascii_width=64, charset='hex', dither_algorithm='ordered')
    manager.save(config)

    saved = json.loads((tmp_path / 'settings.json').read_text(encoding='utf-8'))
    assert saved['charset'] == 'hex'
    assert manager.load() == config


def test_config_manager_missing_file_gives_defaults(tmp_path):
    assert ConfigManager(tmp_path / 'absent.json').load() == RenderConfig()


@pytest.mark.parametrize("content", [
    '{not json',
    '[1, 2, 3]',
    '{"contrast": 300}',
    '{"brightness": "10"}',
    '{"charset": 5}',
    '{"clahe_tile_size": "8"}',
])
def test_config_manager_rejects_bad_files(tmp_path, content):
    path = tmp_path / 'bad.json'
    path.write_text(content, encoding='utf-8')
    with pytest.raises(InvalidConfig):
        ConfigManager(path).load()


@pytest.mark.parametrize("name", Presets.NAMES)
def test_presets_are_valid(name):
    assert isinstance(Presets.get(name).validate(), RenderConfig)


def test_unknown_preset():
    with pytest.raises(InvalidConfig):
        Presets.get('vaporwave')
