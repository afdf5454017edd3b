"""
Unit tests for training dataset assembly and JSONL serialization.
"""

import json

import pytest

from feedback_loop.core.exceptions import MalformedRecordError
from feedback_loop.feedback.schema import FeedbackRecord
from feedback_loop.finetune.dataset import (
    TrainingExample,
    build_dataset,
    build_training_prompt,
    format_completion,
    load_dataset,
    serialize_dataset,
    write_dataset,
)


def _record(**overrides) -> FeedbackRecord:
    data = {
        "section_id": "roof",
        "rating": 7,
        "feedback": "Good",
        "generated_text": "Text.",
        "timestamp": "2025-03-01T12:00:00Z",
    }
    data.update(overrides)
    return FeedbackRecord(**data)


class TestTrainingExample:
    """Test the per-record mapping."""

    def test_completion_is_trimmed_with_stop_marker(self):
        record = _record(generated_text="  Hello world.  ")
        assert format_completion(record) == "Hello world. END"

    def test_prompt_embeds_section_and_feedback(self):
        record = _record(section_id="foundation", feedback="Mention cracks")
        prompt = build_training_prompt(record)

        assert prompt == (
            "Section: foundation\n"
            "User feedback: Mention cracks\n"
            "\n"
            "Now produce the final text:\n"
        )

    def test_missing_generated_text_is_rejected(self):
        with pytest.raises(MalformedRecordError):
            format_completion(_record(generated_text=None))

    def test_blank_generated_text_is_rejected(self):
        with pytest.raises(MalformedRecordError):
            format_completion(_record(generated_text="   \n"))


class TestBuildDataset:
    """Test dataset-level behavior."""

    def test_one_example_per_record_in_order(self, feedback_records):
        dataset = build_dataset(feedback_records)

        assert len(dataset) == len(feedback_records)
        assert [e.prompt.splitlines()[0] for e in dataset] == ["Section: roof", "Section: siding"]
        assert dataset[0].completion == "The roof shows hail impact marks. END"
        assert dataset[1].completion == "Siding is intact. END"

    def test_empty_input(self):
        assert build_dataset([]) == []

    def test_one_bad_record_aborts_the_build(self):
        records = [_record(), _record(generated_text=""), _record()]

        with pytest.raises(MalformedRecordError, match="Record 1"):
            build_dataset(records)


class TestSerialization:
    """Test the JSONL upload format."""

    def test_lines_decode_to_prompt_completion_pairs(self, feedback_records):
        dataset = build_dataset(feedback_records)
        text = serialize_dataset(dataset)

        lines = text.split("\n")
        assert lines[-1] == ""
        body = lines[:-1]
        assert len(body) == len(feedback_records)
        for line, example in zip(body, dataset):
            decoded = json.loads(line)
            assert list(decoded.keys()) == ["prompt", "completion"]
            assert decoded == {"prompt": example.prompt, "completion": example.completion}

    def test_compact_encoding(self):
        text = serialize_dataset([TrainingExample(prompt="p", completion="c END")])
        assert text == '{"prompt":"p","completion":"c END"}\n'

    def test_non_ascii_is_written_verbatim(self):
        text = serialize_dataset([TrainingExample(prompt="Température", completion="72°F END")])
        assert "Température" in text
        assert "72°F" in text

    def test_write_ends_with_single_newline(self, tmp_path, feedback_records):
        path = write_dataset(build_dataset(feedback_records), tmp_path / "out" / "data.jsonl")

        raw = path.read_bytes()
        assert raw.endswith(b"\n")
        assert not raw.endswith(b"\n\n")
        assert raw.count(b"\n") == len(feedback_records)

    def test_load_reads_back_written_file(self, tmp_path, feedback_records):
        dataset = build_dataset(feedback_records)
        path = write_dataset(dataset, tmp_path / "data.jsonl")

        assert load_dataset(path) == dataset
