import csv

from conftest import CARDS_DIR, REPO_ROOT
from lunchbox.cli import main, parse_replacements

PROFILE = str(REPO_ROOT / "examples" / "child.yaml")


def run(tmp_path, *extra):
    argv = [
        "--profile", PROFILE,
        "--cards_dir", str(CARDS_DIR),
        "--policy", str(REPO_ROOT / "planner.yaml"),
        "--out_dir", str(tmp_path),
        "--seed", "11",
        *extra,
    ]
    return main(argv)


def read_rows(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def test_week_outputs(tmp_path):
    assert run(tmp_path, "--start", "2026-10-19") == 0
    rows = read_rows(tmp_path / "menu_plan.csv")
    assert len(rows) == 5
    assert len({r["recipe_id"] for r in rows}) == 5
    assert read_rows(tmp_path / "shopping_list.csv")
    md = (tmp_path / "menu_plan.md").read_text(encoding="utf-8")
    assert md.startswith("# Weekly Menu for Tomás")
    assert "## Shopping List (by category)" in md


def test_month_with_two_meal_types(tmp_path):
    assert run(tmp_path, "--start", "2026-10-17", "--horizon", "month",
               "--meals", "lunch", "afternoon_snack") == 0
    rows = read_rows(tmp_path / "menu_plan.csv")
    assert rows[0]["date"] == "2026-10-19"
    lunches = [r for r in rows if r["meal_type"] == "lunch"]
    assert len(lunches) == 20
    assert len(rows) == 40
    assert len({r["recipe_id"] for r in rows}) == len(rows)


def test_replace_option_runs(tmp_path):
    assert run(tmp_path, "--start", "2026-10-19", "--replace", "2026-10-21:lunch") == 0
    assert len(read_rows(tmp_path / "menu_plan.csv")) == 5


def test_bad_inputs_exit_nonzero(tmp_path):
    assert run(tmp_path, "--meals", "brunch") == 1
    assert run(tmp_path, "--replace", "2026-10-21") == 1


def test_parse_replacements():
    (day, meal), = parse_replacements(["2026-10-21:lunch"])
    assert day.isoformat() == "2026-10-21"
    assert meal == "lunch"
