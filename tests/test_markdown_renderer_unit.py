from __future__ import annotations

import pytest

from utils.changelog_models import Category, ChangeEntry, ReleaseRecord
from utils.markdown_renderer import render_markdown, render_release


def _release(tag, date='2020-01-02', **groups) -> ReleaseRecord:
    return ReleaseRecord(
        tag=tag,
        date=date,
        groups={Category(k): [ChangeEntry(message=m) for m in v] for k, v in groups.items()},
    )


@pytest.mark.unit
def test_render_release_layout() -> None:
    release = _release('1.1.0', Fixed=['Fix a', 'Fix b'], Added=['Add c'])
    assert render_release(release) == (
        '## [1.1.0] - 2020-01-02\n'
        '### Fixed\n'
        '- Fix a\n'
        '- Fix b\n'
        '\n'
        '### Added\n'
        '- Add c\n'
        '\n'
        '\n'
    )


@pytest.mark.unit
def test_render_release_without_groups() -> None:
    assert render_release(_release('2.0.0', date='1970-01-01')) == '## [2.0.0] - 1970-01-01\n\n'


@pytest.mark.unit
def test_empty_unreleased_is_skipped() -> None:
    assert render_release(_release('HEAD')) == ''


@pytest.mark.unit
def test_unreleased_heading_has_no_date() -> None:
    out = render_release(_release('HEAD', Changed=['Tweak']))
    assert out.startswith('## [Unreleased]\n### Changed\n- Tweak\n')


@pytest.mark.unit
def test_production_marker_only_on_production_tag() -> None:
    releases = [_release('1.2.0'), _release('1.1.0'), _release('1.0.0')]
    out = render_markdown(releases, production_version='1.1.0')
    assert '## [1.1.0] - 2020-01-02 **ON PRODUCTION**\n' in out
    assert out.count('**ON PRODUCTION**') == 1


@pytest.mark.unit
def test_no_production_marker_when_version_empty() -> None:
    assert '**ON PRODUCTION**' not in render_markdown([_release('1.0.0')], production_version='')


@pytest.mark.unit
def test_render_is_pure() -> None:
    releases = [_release('HEAD', Added=['Add x']), _release('1.0.0', Fixed=['Fix y'])]
    assert render_markdown(releases, '1.0.0') == render_markdown(releases, '1.0.0')
    assert render_markdown([]) == ''
