"""
Tests for the command line entry point.
"""

import argparse
import json

import pytest

from dungeon_forge.generate import main, parse_param

from graph_fixtures import single_room_document


class TestParseParam:

    def test_json_values(self):
        assert parse_param('minRoomSize=6') == ('minRoomSize', 6)
        assert parse_param('flag=true') == ('flag', True)

    def test_plain_string(self):
        assert parse_param('theme=crypt') == ('theme', 'crypt')

    def test_missing_equals(self):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_param('minRoomSize')


class TestMain:
    """main() end to end."""

    def test_fallback_to_stdout(self, capsys):
        assert main(['--seed', '5']) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload['seed'] == 5
        assert payload['metadata']['path'] == 'fallback'

    def test_graph_file_to_output(self, tmp_path):
        graph_path = tmp_path / 'gen.json'
        graph_path.write_text(json.dumps(single_room_document()))
        out_path = tmp_path / 'out' / 'layout.json'

        assert main(['--graph', str(graph_path), '--seed', '2', '--output', str(out_path)]) == 0
        payload = json.loads(out_path.read_text())
        assert payload['metadata']['path'] == 'graph'
        assert len(payload['data']['rooms']) == 1

    def test_simulation(self, tmp_path, capsys):
        graph_path = tmp_path / 'gen.json'
        graph_path.write_text(json.dumps(single_room_document()))

        assert main(['--graph', str(graph_path), '--simulate', '4', '--seed-start', '10',
                     '--param', 'minRoomSize=6']) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload['runs'] == 4
        assert payload['config']['seedStart'] == 10
        assert payload['config']['parameters'] == {'minRoomSize': 6}

    def test_missing_graph_file(self, tmp_path):
        assert main(['--graph', str(tmp_path / 'missing.json')]) == 2

    def test_bad_seed_exits(self):
        with pytest.raises(SystemExit):
            main(['--seed', '-1'])
