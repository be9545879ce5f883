import shutil
from pathlib import Path

import pytest

from grammar import Context, GrammarEngine

REPO_GRAMMARS = Path(__file__).resolve().parent.parent / "grammars"

LOCATIONS = ["韶关", "广州"]
CATEGORIES = ["老人", "妇女", "儿童"]


@pytest.fixture
def free_ride():
    """The canonical two-role fare-exemption context."""
    return Context.build(
        [("location", LOCATIONS), ("category", CATEGORIES)],
        delimiter="的",
        grammar_id="free_ride",
    )


@pytest.fixture
def grammars_dir(tmp_path):
    """Writable copy of the shipped grammars directory."""
    target = tmp_path / "grammars"
    shutil.copytree(REPO_GRAMMARS, target)
    return target


@pytest.fixture
def engine(grammars_dir):
    return GrammarEngine(grammars_path=str(grammars_dir))
