import json
import logging

import pytest
from PIL import Image

from ascii_motion import DitherAlgorithm, EdgeMethod
from ascii_motion import cli
from ascii_motion.cli import FRAME_SEPARATOR, build_config, create_argument_parser, load_source, main
from ascii_motion.video import VideoInfo

PLAIN = ['-w', '10', '--charset', 'standard', '--dither', 'none', '--keep-white']


@pytest.fixture(autouse=True)
def restore_root_handlers():
    root = logging.getLogger()
    before = list(root.handlers)
    yield
    for handler in root.handlers[:]:
        if handler not in before:
            root.removeHandler(handler)
            handler.close()


@pytest.fixture
def black_png(tmp_path):
    path = tmp_path / 'black.png'
    Image.new('RGB', (10, 10), color=(0, 0, 0)).save(path)
    return path


@pytest.fixture
def animated_gif(tmp_path):
    path = tmp_path / 'anim.gif'
    images = [Image.new('RGB', (10, 10), color=c)
              for c in [(0, 0, 0), (255, 255, 255), (128, 128, 128)]]
    images[0].save(path, save_all=True, append_images=images[1:], duration=80, loop=0)
    return path


def test_renders_image_to_stdout(black_png, capsys):
    assert main([str(black_png)] + PLAIN) == 0
    out = capsys.readouterr().out
    assert out == ('@' * 10 + '\n') * 6


def test_writes_output_file(black_png, tmp_path, capsys):
    output = tmp_path / 'out.txt'
    assert main([str(black_png), '-o', str(output)] + PLAIN) == 0
    assert output.read_text(encoding='utf-8') == ('@' * 10 + '\n') * 6
    assert 'Saved 1 frame(s)' in capsys.readouterr().err


def test_animated_gif_frames_are_separated(animated_gif, capsys):
    assert main([str(animated_gif)] + PLAIN) == 0
    captured = capsys.readouterr()
    frames = captured.out.split(FRAME_SEPARATOR)
    assert len(frames) == 3
    assert frames[0].startswith('@' * 10)
    assert frames[1].startswith('.' * 10)
    assert 'Converting frames to ASCII: 100% (3/3)' in captured.err


def test_invalid_setting_reports_error(black_png, capsys):
    assert main([str(black_png), '--contrast', '300']) == 1
    assert capsys.readouterr().err.startswith('Error: contrast')


def test_missing_input_reports_error(tmp_path, capsys):
    assert main([str(tmp_path / 'nope.png')]) == 1
    assert 'Error:' in capsys.readouterr().err


def test_save_and_reuse_config(black_png, tmp_path, capsys):
    settings = tmp_path / 'settings.json'
    assert main([str(black_png), '--save-config', str(settings)] + PLAIN) == 0
    assert json.loads(settings.read_text(encoding='utf-8'))['ascii_width'] == 10
    capsys.readouterr()

    assert main([str(black_png), '--config', str(settings)]) == 0
    assert capsys.readouterr().out == ('@' * 10 + '\n') * 6


def test_analysis_output(black_png, capsys):
    assert main([str(black_png), '--analyze'] + PLAIN) == 0
    out = capsys.readouterr().out
    assert 'Character Distribution (top 10):' in out
    assert '@: 60' in out


def test_build_config_overrides():
    parser = create_argument_parser()
    config = build_config(parser.parse_args(
        ['x.png', '--preset', 'retro', '-w', '40', '--edge-method', 'clahe']))
    assert config.ascii_width == 40
    assert config.charset == 'blocks'
    assert config.edge_method is EdgeMethod.CLAHE

    config = build_config(parser.parse_args(['x.png', '--dither', 'atkinson', '--ignore-green']))
    assert config.dithering and config.ignore_green
    assert config.dither_algorithm is DitherAlgorithm.ATKINSON
    assert config.ignore_white

    config = build_config(parser.parse_args(['x.png', '--dither', 'none', '--keep-white']))
    assert not config.dithering and not config.ignore_white


def test_wrong_typed_config_file_reports_error(black_png, tmp_path, capsys):
    settings = tmp_path / 'settings.json'
    settings.write_text('{"charset": 5}', encoding='utf-8')
    assert main([str(black_png), '--config', str(settings)]) == 1
    assert capsys.readouterr().err.startswith('Error:')


@pytest.mark.parametrize("fps", ['0', '-5'])
def test_play_with_bad_fps_reports_error(animated_gif, capsys, fps):
    assert main([str(animated_gif), '--play', '--fps', fps, '--loops', '1'] + PLAIN) == 1
    assert 'fps must be > 0' in capsys.readouterr().err


def test_video_report_uses_requested_fps(monkeypatch, caplog):
    sampled = []

    def fake_sample(path, count):
        sampled.append(count)
        return [Image.new('RGB', (8, 6))] * count

    monkeypatch.setattr(cli, 'probe_video', lambda path: VideoInfo(10.0, 8, 6))
    monkeypatch.setattr(cli, 'sample_frames', fake_sample)
    caplog.set_level(logging.INFO, logger='ascii_motion')

    frames = load_source('clip.mp4', 60, 24)
    assert len(frames) == 60 and sampled == [60]
    assert 'Animation length: 2.5s at 24 fps' in caplog.text
