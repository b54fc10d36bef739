from briefing.models.sections import SectionOverride
from briefing.services import section_normalizer
from briefing.services.section_catalog import DEFAULT_SECTIONS, SECTION_INDEX
from briefing.services.section_normalizer import normalize_sections, resolve_target_words

from .helpers import make_template


def test_defaults_follow_catalog_order():
    runtimes = normalize_sections()
    assert [r.template.id for r in runtimes] == [t.id for t in DEFAULT_SECTIONS]
    assert [r.target_words for r in runtimes] == [130, 260, 130]
    assert all(r.prompt == r.template.default_prompt for r in runtimes)
    # templates are shared, not copied
    assert runtimes[0].template is SECTION_INDEX["major-news"]


def test_blank_prompt_falls_back_to_default():
    runtimes = normalize_sections([
        SectionOverride(id="major-news", prompt="   \n\t"),
        SectionOverride(id="party-discipline", prompt=None),
    ])
    assert runtimes[0].prompt == SECTION_INDEX["major-news"].default_prompt
    assert runtimes[2].prompt == SECTION_INDEX["party-discipline"].default_prompt


def test_override_prompt_is_trimmed_and_duration_applied():
    runtimes = normalize_sections([
        SectionOverride(id="power-zhejiang-qiantang", prompt="  聚焦迎峰度夏  ", duration_minutes=2),
    ])
    power = runtimes[1]
    assert power.prompt == "聚焦迎峰度夏"
    assert power.duration_minutes == 2
    # explicit catalog target wins over the duration
    assert power.target_words == 260


def test_unknown_ids_are_ignored_and_last_override_wins():
    runtimes = normalize_sections([
        SectionOverride(id="does-not-exist", prompt="x"),
        SectionOverride(id="major-news", prompt="first"),
        SectionOverride(id="major-news", prompt="second"),
    ])
    assert len(runtimes) == len(DEFAULT_SECTIONS)
    assert runtimes[0].prompt == "second"


def test_target_words_derived_from_duration_without_explicit_value():
    catalog = (make_template("a", duration_minutes=0.5), make_template("b", duration_minutes=1))
    runtimes = normalize_sections([SectionOverride(id="b", duration_minutes=0.25)], catalog)
    assert [r.target_words for r in runtimes] == [130, 65]


def test_target_words_round_half_up(monkeypatch):
    monkeypatch.setattr(section_normalizer, "WORDS_PER_MINUTE", 2)
    template = make_template()
    assert resolve_target_words(template, 1.25) == 3
    assert resolve_target_words(template, 1.75) == 4


def test_target_words_never_negative():
    template = make_template()
    assert resolve_target_words(template, 0) == 0
    assert resolve_target_words(template, -1) == 0


def test_explicit_target_words_always_win():
    template = make_template(target_words=99)
    assert resolve_target_words(template, 0) == 99
    assert resolve_target_words(template, 10) == 99
