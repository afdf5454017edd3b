"""
Unit tests for the scheduled fine-tune workflow settings.
"""

import re
from pathlib import Path

WORKFLOW = Path(__file__).resolve().parents[2] / ".github" / "workflows" / "fine-tune.yml"


def test_polling_deadline_expires_before_job_timeout():
    text = WORKFLOW.read_text(encoding="utf-8")

    job_minutes = int(re.search(r"timeout-minutes:\s*(\d+)", text).group(1))
    deadline = float(re.search(r"feedback-loop-finetune\s+--timeout\s+(\d+)", text).group(1))

    assert 0 < deadline < job_minutes * 60
