"""Configuration constants for the ASR pipeline.

Values here describe the notebook editor's markup and the legacy table layout.
They are not expected to change per run; only the log level can be overridden
through the ``ASR_LOG_LEVEL`` environment variable.
"""

from __future__ import annotations

import os
import re

# Inline action the notebook editor renders on sample links, e.g.
# <a onclick="Experiment.Section.Sample.view(12345)">Glucose</a>
SAMPLE_VIEW_ACTION = "Experiment.Section.Sample.view"
SAMPLE_VIEW_RE = re.compile(r"Experiment\.Section\.Sample\.view\((\d+)\)")

# Decimal places kept after every unit conversion
AMOUNT_PRECISION = 6

# Legacy fixed-layout usage table:
# Item | Qty needed/L | Unit | Qty needed | Unit | Amount used | Unit
LEGACY_MIN_COLUMNS = 7
LEGACY_AMOUNT_INDEX = 5
LEGACY_UNIT_INDEX = 6

# Logging Settings
LOGGING = {
    'level': 'INFO',                   # DEBUG, INFO, WARNING, ERROR
    'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    'file_name': 'asr_pipeline.log',
}


def get_log_level() -> str:
    """Return the configured log level, preferring ``ASR_LOG_LEVEL`` when set."""

    return os.environ.get("ASR_LOG_LEVEL", LOGGING["level"]).upper()
