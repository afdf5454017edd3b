"""
Dataset utilities for provider-side fine-tuning.

Converts stored feedback rows into prompt-completion training examples and
writes them as JSONL, the upload format the provider expects.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Union

from pydantic import BaseModel

from feedback_loop.core.exceptions import MalformedRecordError
from feedback_loop.feedback.schema import FeedbackRecord

STOP_MARKER = " END"


class TrainingExample(BaseModel):
    """
    Single supervised fine-tuning pair.
    """

    prompt: str
    completion: str


def build_training_prompt(record: FeedbackRecord) -> str:
    """
    Build the prompt half of a training pair from section id and user comment.
    """

    return (
        f"Section: {record.section_id}\n"
        f"User feedback: {record.feedback}\n"
        "\n"
        "Now produce the final text:\n"
    )


def format_completion(record: FeedbackRecord) -> str:
    """
    Format the target completion: trimmed generated text plus the stop marker.
    """

    text = (record.generated_text or "").strip()
    if not text:
        raise MalformedRecordError(
            f"Feedback for section {record.section_id!r} has no generated text"
        )
    return text + STOP_MARKER


def build_dataset(records: Iterable[FeedbackRecord]) -> List[TrainingExample]:
    """
    Map each record to exactly one TrainingExample, preserving input order.

    A single malformed record aborts the whole build.
    """

    dataset: List[TrainingExample] = []
    for index, record in enumerate(records):
        try:
            completion = format_completion(record)
        except MalformedRecordError as exc:
            raise MalformedRecordError(f"Record {index}: {exc}") from exc
        dataset.append(TrainingExample(prompt=build_training_prompt(record), completion=completion))
    return dataset


def serialize_example(example: TrainingExample) -> str:
    return json.dumps(
        {"prompt": example.prompt, "completion": example.completion},
        ensure_ascii=False,
        separators=(",", ":"),
    )


def serialize_dataset(dataset: Iterable[TrainingExample]) -> str:
    """
    Encode the dataset as JSONL: one compact object per line, each line
    newline-terminated.
    """

    return "".join(serialize_example(example) + "\n" for example in dataset)


def write_dataset(dataset: Iterable[TrainingExample], path: Union[str, Path]) -> Path:
    path = Path(path)
    if path.parent != Path("."):
        path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(serialize_dataset(dataset))
    return path


def load_dataset(path: Union[str, Path]) -> List[TrainingExample]:
    """
    Load JSONL training examples from disk.

    Each line must be a JSON object with keys: prompt, completion.
    """

    examples: List[TrainingExample] = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            examples.append(TrainingExample(**json.loads(line)))
    return examples
