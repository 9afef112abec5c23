"""Smoke tests for the purgelapse command line."""

import json

import pytest

from purgelapse.cli.main import create_parser, main


def record(minute: int, operation: str, segment: int, items) -> dict:
    return {
        "bucket": f"2022-09-02 16:{minute:02d}:00.0",
        "operation": operation,
        "segment": segment,
        "items": list(items),
    }


@pytest.fixture
def corpus(tmp_path, write_jsonl):
    write_jsonl(tmp_path / "segments" / "0.gz", [{"segment": 1, "num": 4}, {"segment": 2, "num": 2}])
    write_jsonl(
        tmp_path / "events" / "0.gz",
        [record(0, "delete", 1, [1, 2]), record(5, "expire", 1, [1])],
    )
    write_jsonl(tmp_path / "events" / "1.gz", [record(0, "delete", 2, [2])])
    return tmp_path


class TestParser:
    def test_render_arguments(self):
        args = create_parser().parse_args(["render", "seg", "ev", "out", "500", "--no-progress"])
        assert args.command == "render"
        assert args.output_size == 500
        assert args.no_progress is True

    def test_output_size_is_optional(self):
        args = create_parser().parse_args(["render", "seg", "ev", "out"])
        assert args.output_size is None

    def test_config_requires_subcommand(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["config"])


class TestConfigCommand:
    def test_set_persists(self, isolated_settings):
        assert main(["config", "set", "video.fps", "30"]) == 0
        saved = json.loads((isolated_settings / "config.json").read_text())
        assert saved["fps"] == 30

    def test_set_unknown_key_fails(self):
        assert main(["config", "set", "video.bitrate", "9000"]) == 1

    def test_reset(self, isolated_settings):
        main(["config", "set", "video.fps", "30"])
        assert main(["config", "reset"]) == 0
        saved = json.loads((isolated_settings / "config.json").read_text())
        assert saved["fps"] == 12

    def test_show(self):
        assert main(["config", "show"]) == 0

    def test_corrupt_settings_file(self, isolated_settings):
        isolated_settings.mkdir(parents=True, exist_ok=True)
        (isolated_settings / "config.json").write_text("[broken")
        assert main(["config", "show"]) == 1


class TestRenderCommand:
    def test_render_writes_frames(self, corpus):
        code = main(
            [
                "render",
                str(corpus / "segments"),
                str(corpus / "events"),
                str(corpus / "frames"),
                "48",
                "--no-progress",
            ]
        )

        assert code == 0
        assert sorted(p.name for p in (corpus / "frames").iterdir()) == ["0000.png", "0001.png"]

    def test_render_uses_configured_output_size(self, corpus):
        from PIL import Image

        main(["config", "set", "render.output_size", "40"])
        main(["render", str(corpus / "segments"), str(corpus / "events"), str(corpus / "frames"), "--no-progress"])

        with Image.open(corpus / "frames" / "0000.png") as frame:
            assert frame.size[0] == 40

    def test_out_of_order_source_fails(self, corpus, write_jsonl):
        write_jsonl(
            corpus / "events" / "2.gz",
            [record(9, "delete", 1, [3]), record(1, "delete", 1, [4])],
        )
        code = main(
            ["render", str(corpus / "segments"), str(corpus / "events"), str(corpus / "frames"), "--no-progress"]
        )
        assert code == 1

    def test_missing_input_directory_fails(self, tmp_path):
        code = main(["render", str(tmp_path / "nope"), str(tmp_path), str(tmp_path / "frames")])
        assert code == 1

    def test_bad_object_reference_fails(self, corpus, write_jsonl):
        write_jsonl(corpus / "events" / "2.gz", [record(3, "delete", 2, [3])])
        code = main(
            ["render", str(corpus / "segments"), str(corpus / "events"), str(corpus / "frames"), "--no-progress"]
        )
        assert code == 1


class TestSortCommand:
    def test_sort_then_render(self, tmp_path, write_jsonl):
        write_jsonl(tmp_path / "segments" / "0.gz", [{"segment": 1, "num": 3}])
        write_jsonl(
            tmp_path / "raw" / "0",
            [record(7, "expire", 1, [1]), record(2, "delete", 1, [1, 2])],
            compress=False,
        )

        assert main(["sort", str(tmp_path / "raw"), str(tmp_path / "sorted")]) == 0
        code = main(
            ["render", str(tmp_path / "segments"), str(tmp_path / "sorted"), str(tmp_path / "frames"), "32", "--no-progress"]
        )

        assert code == 0
        assert len(list((tmp_path / "frames").iterdir())) == 2
