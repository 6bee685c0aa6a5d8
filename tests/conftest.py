import sys
from pathlib import Path

import pytest

# make the project root importable
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from data_manager.excel_handler import init_excel  # noqa: E402


@pytest.fixture
def temp_excel(tmp_path):
    """Fresh workbook in a temporary directory."""
    filepath = tmp_path / "rent_data.xlsx"
    init_excel(filepath)
    return filepath
