"""Tests for the analysis prompt."""

from upgrade_advisor.prompts import (
    SECTION_HEADINGS,
    VERDICT_CONDITIONAL,
    VERDICT_NOT_RECOMMENDED,
    VERDICT_RECOMMENDED,
    build_prompt,
)


def test_prompt_contains_package_details():
    prompt = build_prompt("7-Zip", "7zip.7zip", "22.01", "23.01")

    assert "7-Zip" in prompt
    assert "`7zip.7zip`" in prompt
    assert "`22.01`" in prompt
    assert "`23.01`" in prompt


def test_prompt_contains_every_section_in_order():
    prompt = build_prompt("Git", "Git.Git", "2.43.0", "2.44.0")

    positions = [prompt.index(heading) for heading in SECTION_HEADINGS]
    assert positions == sorted(positions)


def test_prompt_lists_verdicts():
    prompt = build_prompt("Git", "Git.Git", "2.43.0", "2.44.0")

    for verdict in (VERDICT_RECOMMENDED, VERDICT_CONDITIONAL, VERDICT_NOT_RECOMMENDED):
        assert verdict in prompt


def test_prompt_is_deterministic():
    first = build_prompt("Git", "Git.Git", "2.43.0", "2.44.0")
    second = build_prompt("Git", "Git.Git", "2.43.0", "2.44.0")

    assert first == second
    assert first != build_prompt("Git", "Git.Git", "2.43.0", "2.45.0")


def test_prompt_tolerates_braces_in_values():
    """Test that format placeholders inside values are not expanded."""
    prompt = build_prompt("Tool {name}", "Vendor.Tool", "1.0", "2.0")

    assert "Tool {name}" in prompt
