"""
Test the per-file host flow and the command line with mocked probes and ffmpeg
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from hevc_optimizer import PolicyInputs
from hevc_optimizer.cli import main, parse_arguments, collect_inputs
from hevc_optimizer.file_utils import collect_video_files, output_paths
from hevc_optimizer.processor import process_file


@pytest.fixture
def mocked_probe(ffprobe_output, mediainfo_output):
    with patch('hevc_optimizer.processor.ffprobe_json', return_value=ffprobe_output) as mock_probe, \
         patch('hevc_optimizer.processor.mediainfo_json', return_value=mediainfo_output):
        yield mock_probe


class TestProcessFile:
    """Test process_file with probing and ffmpeg mocked out"""

    def test_decide_only(self, tmp_path, mocked_probe):
        src = tmp_path / 'movie.mp4'
        src.touch()

        with patch('hevc_optimizer.processor.run') as mock_run:
            result = process_file(src, PolicyInputs())

        assert result == 'transcode'
        mock_run.assert_not_called()

    def test_skip(self, tmp_path, mocked_probe, ffprobe_output):
        ffprobe_output['streams'][0]['codec_name'] = 'hevc'
        ffprobe_output['streams'][0]['height'] = 720
        src = tmp_path / 'movie.mkv'
        src.touch()

        assert process_file(src, PolicyInputs()) == 'skipped'

    def test_probe_failure(self, tmp_path):
        src = tmp_path / 'broken.mkv'
        src.touch()

        with patch('hevc_optimizer.processor.ffprobe_json', side_effect=RuntimeError('ffprobe failed')):
            assert process_file(src, PolicyInputs()) == 'error'

    def test_execute_success(self, tmp_path, mocked_probe):
        src = tmp_path / 'movie.mp4'
        src.write_text('original')
        out_dir = tmp_path / 'out'
        temp_path, final_path = output_paths(src, out_dir, 'mkv')

        def fake_ffmpeg(cmd, progress_callback=None):
            progress_callback(60.0)
            temp_path.write_text('encoded')
            return 0, ''

        with patch('hevc_optimizer.processor.run', side_effect=fake_ffmpeg) as mock_run:
            result = process_file(src, PolicyInputs(), out_dir, execute=True)

        assert result == 'processed'
        assert final_path.read_text() == 'encoded'
        assert not temp_path.exists()
        assert src.exists()

        cmd = mock_run.call_args[0][0]
        assert cmd[0] == 'ffmpeg'
        assert cmd[cmd.index('-i') + 1] == str(src)
        assert cmd[-3:] == ['-f', 'matroska', str(temp_path)]
        assert '<io>' not in cmd
        assert cmd[cmd.index('-map') + 1] == '0'
        assert cmd[-5:-3] == ['-max_muxing_queue_size', '9999']

    def test_execute_failure_removes_partial_output(self, tmp_path, mocked_probe):
        src = tmp_path / 'movie.mp4'
        src.touch()
        temp_path, final_path = output_paths(src, tmp_path, 'mkv')

        def failing_ffmpeg(cmd, progress_callback=None):
            temp_path.write_text('partial')
            return 1, 'No NVENC capable devices found'

        with patch('hevc_optimizer.processor.run', side_effect=failing_ffmpeg):
            result = process_file(src, PolicyInputs(), execute=True)

        assert result == 'error'
        assert not temp_path.exists()
        assert not final_path.exists()

    def test_existing_output_skipped(self, tmp_path, mocked_probe):
        src = tmp_path / 'movie.mp4'
        src.touch()
        (tmp_path / 'movie.mkv').write_text('already there')

        with patch('hevc_optimizer.processor.run') as mock_run:
            assert process_file(src, PolicyInputs(), execute=True) == 'skipped'
        mock_run.assert_not_called()

    def test_json_output(self, tmp_path, mocked_probe, capsys):
        src = tmp_path / 'movie.mkv'
        src.touch()

        assert process_file(src, PolicyInputs(), as_json=True) == 'transcode'
        response = json.loads(capsys.readouterr().out)

        assert response['file'] == str(src)
        assert response['processFile'] is True
        assert response['container'] == '.mkv'
        assert 'Stream: 1920x1080@23.976fps' in response['infoLog']


class TestFileUtils:

    def test_collect_video_files(self, tmp_path):
        (tmp_path / 'season').mkdir()
        for name in ['b.mkv', 'a.MP4', 'season/c.ts', 'notes.txt', 'cover.jpg']:
            (tmp_path / name).touch()

        files = collect_video_files(tmp_path)
        assert [f.relative_to(tmp_path).as_posix() for f in files] == ['a.MP4', 'b.mkv', 'season/c.ts']

    def test_collect_single_file(self, tmp_path):
        video, text = tmp_path / 'a.mkv', tmp_path / 'a.txt'
        video.touch()
        text.touch()

        assert collect_video_files(video) == [video]
        assert collect_video_files(text) == []

    def test_output_paths(self):
        temp_path, final_path = output_paths(Path('/in/movie.mp4'), Path('/out'), 'mkv')

        assert final_path == Path('/out/movie.mkv')
        assert temp_path == Path('/out/movie.mkv.convert')


class TestCli:
    """Test argument handling of the command line host"""

    def test_collect_inputs_only_set_options(self):
        args = parse_arguments(['/media', '--cqv', '24', '--no-ten-bit', '--preset', 'p5'])
        assert collect_inputs(args) == {'cqv': 24, 'ten_bit': False, 'ffmpeg_preset': 'p5'}

    def test_root_required(self):
        with pytest.raises(SystemExit):
            parse_arguments([])

    def test_describe(self, capsys):
        assert main(['--describe']) == 0
        info = json.loads(capsys.readouterr().out)
        assert len(info['Inputs']) == 7

    def test_missing_ffprobe(self, tmp_path):
        with patch('hevc_optimizer.cli.shutil.which', return_value=None):
            assert main([str(tmp_path)]) == 2

    def test_missing_nvenc_with_execute(self, tmp_path):
        with patch('hevc_optimizer.cli.shutil.which', return_value='/usr/bin/tool'), \
             patch('hevc_optimizer.cli.has_hevc_nvenc', return_value=False):
            assert main([str(tmp_path), '--execute']) == 2

    def test_processes_directory(self, tmp_path):
        for name in ['a.mkv', 'b.mp4', 'c.avi', 'readme.txt']:
            (tmp_path / name).touch()

        with patch('hevc_optimizer.cli.shutil.which', return_value='/usr/bin/ffprobe'), \
             patch('hevc_optimizer.cli.process_file', return_value='transcode') as mock_process:
            assert main([str(tmp_path), '--cqv', '24', '--limit', '2']) == 0

        assert mock_process.call_count == 2
        src, inputs, out_dir = mock_process.call_args_list[0][0]
        assert src == tmp_path / 'a.mkv'
        assert inputs.cqv == 24
        assert out_dir is None

    def test_errors_set_exit_code(self, tmp_path):
        (tmp_path / 'a.mkv').touch()

        with patch('hevc_optimizer.cli.shutil.which', return_value='/usr/bin/ffprobe'), \
             patch('hevc_optimizer.cli.process_file', return_value='error'):
            assert main([str(tmp_path)]) == 1
