from __future__ import annotations

import logging

from nirify.document import parse_document
from nirify.models import (
    LayerRule,
    OpenBehavior,
    Settings,
    ShadowSettings,
    WindowRule,
    WindowRuleMatch,
    WindowRulesSettings,
)
from nirify.registry import SettingsCategory
from nirify.sections.rules import load_rules, parse_window_rule
from tests.utils import parse_into, round_trip


def test_rule_names_round_trip_through_comments():
    settings = Settings()
    rule = settings.window_rules.add(WindowRule(matches=[WindowRuleMatch(app_id="^firefox$")]))
    rule.name = "Browser"
    rule.open_behavior = OpenBehavior.MAXIMIZED
    rule.opacity = 0.9
    loaded = round_trip(SettingsCategory.WINDOW_RULES, settings)
    (got,) = loaded.window_rules
    assert got.name == "Browser"
    assert got.matches[0].app_id == "^firefox$"
    assert got.open_behavior is OpenBehavior.MAXIMIZED
    assert got.opacity == 0.9


def test_multi_line_rule_name_stays_a_comment():
    settings = Settings()
    rule = settings.window_rules.add(WindowRule(matches=[WindowRuleMatch(app_id="^steam$")]))
    rule.name = "Games\nwindow-rule { open-fullscreen true; }"
    loaded = round_trip(SettingsCategory.WINDOW_RULES, settings)
    (got,) = loaded.window_rules
    assert got.name == "Games window-rule { open-fullscreen true; }"
    assert got.matches[0].app_id == "^steam$"
    assert got.open_behavior is not OpenBehavior.FULLSCREEN


def test_unnamed_rules_get_numbered_names():
    text = (
        'window-rule {\n    match app-id="a"\n}\n'
        'window-rule {\n    match app-id="b"\n}\n'
    )
    target = WindowRulesSettings()
    added = load_rules(
        parse_document(text), "window-rule", WindowRule, parse_window_rule, "Rule", target
    )
    assert added == 2
    assert [r.name for r in target] == ["Rule 1", "Rule 2"]
    assert [r.id for r in target] == [0, 1]


def test_catch_all_rule_is_not_a_window_rule():
    text = 'window-rule {\n    geometry-corner-radius 6\n}\nwindow-rule {\n    match title="x"\n}\n'
    settings = parse_into(SettingsCategory.WINDOW_RULES, text)
    assert len(settings.window_rules) == 1
    parse_into(SettingsCategory.APPEARANCE, text, settings)
    assert settings.appearance.corner_radius == 6


def test_rule_without_matches_still_renders_a_match():
    settings = Settings()
    settings.window_rules.add(WindowRule(matches=[WindowRuleMatch()], opacity=0.5))
    loaded = round_trip(SettingsCategory.WINDOW_RULES, settings)
    assert len(loaded.window_rules) == 1


def test_invalid_regex_is_dropped(caplog):
    text = 'window-rule {\n    match app-id="(" title="ok"\n}\n'
    with caplog.at_level(logging.WARNING, logger="nirify.sections.rules"):
        settings = parse_into(SettingsCategory.WINDOW_RULES, text)
    (rule,) = settings.window_rules
    assert rule.matches[0].app_id is None
    assert rule.matches[0].title == "ok"
    assert "invalid regex" in caplog.text


def test_opacity_is_clamped():
    text = 'window-rule {\n    match app-id="a"\n    opacity 1.5\n}\n'
    (rule,) = parse_into(SettingsCategory.WINDOW_RULES, text).window_rules
    assert rule.opacity == 1.0


def test_window_rule_shadow_off_round_trips():
    settings = Settings()
    rule = settings.window_rules.add(WindowRule(matches=[WindowRuleMatch(app_id="a")]))
    rule.shadow = ShadowSettings(enabled=False)
    (got,) = round_trip(SettingsCategory.WINDOW_RULES, settings).window_rules
    assert got.shadow is not None and got.shadow.enabled is False


def test_layer_rule_round_trip():
    settings = Settings()
    rule = settings.layer_rules.add(LayerRule())
    rule.name = "Panel"
    rule.matches[0].namespace = "^waybar$"
    rule.opacity = 0.95
    rule.place_within_backdrop = True
    (got,) = round_trip(SettingsCategory.LAYER_RULES, settings).layer_rules
    assert got.name == "Panel"
    assert got.matches[0].namespace == "^waybar$"
    assert got.opacity == 0.95
    assert got.place_within_backdrop is True


def test_rules_append_across_documents():
    settings = Settings()
    text = 'layer-rule {\n    match namespace="a"\n}\n'
    parse_into(SettingsCategory.LAYER_RULES, text, settings)
    parse_into(SettingsCategory.LAYER_RULES, text, settings)
    assert [r.id for r in settings.layer_rules] == [0, 1]
