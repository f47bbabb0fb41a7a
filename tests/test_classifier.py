"""Tests for reachability classification (phase 5) and its heuristics."""
from pathlib import Path

import pytest

from deadwood.analyzer.classifier import (
    REASON_ENTRY_POINT_INCOMPLETE,
    REASON_NEVER_IMPORTED,
    REASON_NOT_USED,
    REASON_UNKNOWN,
    ReachabilityClassifier,
    get_unused_reason,
)
from deadwood.analyzer.heuristics import Heuristics
from deadwood.analyzer.session import Declaration, ExportRecord, ImportRecord

ROOT = Path('/project')


def declare(session, name, file_name='src/a.ts', kind='function', line=1):
    session.add_declaration(Declaration(name=name, kind=kind, defining_file=ROOT / file_name, line=line))


def export(session, name, file_name='src/a.ts', kind='function'):
    session.add_export(ExportRecord(exported_name=name, exporting_file=ROOT / file_name, export_kind=kind))


def import_(session, name, specifier, file_name='src/b.ts'):
    session.add_import(ImportRecord(local_name=name, source_module=specifier,
                                    importing_file=ROOT / file_name, binding_kind='named'))


class TestHeuristics:

    @pytest.mark.parametrize('path', [
        'src/index.ts', 'lib/main.tsx', 'App.js', 'server/entry.ts', 'BOOTSTRAP.ts',
    ])
    def test_entry_point_names(self, path):
        assert Heuristics().is_likely_entry_point(ROOT / path)

    @pytest.mark.parametrize('path', ['src/utils.ts', 'src/index.test.ts', 'src/indexer.ts'])
    def test_non_entry_points(self, path):
        assert not Heuristics().is_likely_entry_point(ROOT / path)

    def test_builtins(self):
        heuristics = Heuristics()

        assert heuristics.is_builtin('Promise')
        assert heuristics.is_builtin('React')
        assert heuristics.is_builtin('__dirname')
        assert not heuristics.is_builtin('promise')

    def test_extended_adds_names_without_mutating(self):
        base = Heuristics()
        extended = base.extended(builtins=['jQuery'], entry_point_names=['Server'])

        assert extended.is_builtin('jQuery')
        assert extended.is_likely_entry_point(ROOT / 'server.ts')
        assert not base.is_builtin('jQuery')


class TestImportResolution:

    def test_relative_import_of_declaring_file(self, session):
        declare(session, 'util', 'src/a.ts')
        import_(session, 'util', './a', 'src/b.ts')

        assert ReachabilityClassifier(session).is_imported_elsewhere('util', ROOT / 'src/a.ts')

    def test_parent_directory_import(self, session):
        declare(session, 'util', 'src/shared/util.ts')
        import_(session, 'util', '../shared/util', 'src/pages/home.tsx')

        assert ReachabilityClassifier(session).is_imported_elsewhere('util', ROOT / 'src/shared/util.ts')

    def test_import_from_another_file_does_not_match(self, session):
        declare(session, 'util', 'src/a.ts')
        import_(session, 'util', './other', 'src/b.ts')

        assert not ReachabilityClassifier(session).is_imported_elsewhere('util', ROOT / 'src/a.ts')

    def test_package_imports_are_never_resolved(self, session):
        declare(session, 'util', 'src/a.ts')
        import_(session, 'util', 'a', 'src/b.ts')

        assert not ReachabilityClassifier(session).is_imported_elsewhere('util', ROOT / 'src/a.ts')

    def test_directory_index_is_not_resolved(self, session):
        declare(session, 'util', 'src/utils/index.ts')
        import_(session, 'util', './utils', 'src/b.ts')

        assert not ReachabilityClassifier(session).is_imported_elsewhere('util', ROOT / 'src/utils/index.ts')


class TestClassification:

    def test_used_name_is_never_dead(self, session):
        declare(session, 'helper')
        session.add_usage('helper')

        assert ReachabilityClassifier(session).classify() == []

    def test_import_match_overrides_missing_usage(self, session):
        declare(session, 'X', kind='constant')
        import_(session, 'X', './a')

        assert ReachabilityClassifier(session).classify() == []

    def test_builtins_are_never_dead(self, session):
        declare(session, 'Promise', kind='class')

        assert ReachabilityClassifier(session).classify() == []

    def test_custom_builtins(self, session):
        declare(session, 'registerPlugin')

        heuristics = Heuristics().extended(builtins=['registerPlugin'])
        assert ReachabilityClassifier(session, heuristics).classify() == []

    def test_unused_and_unexported(self, session):
        declare(session, 'helper', line=7)

        [item] = ReachabilityClassifier(session).classify()

        assert item.name == 'helper'
        assert item.kind == 'function'
        assert item.line == 7
        assert item.exported is False
        assert item.reason == REASON_NOT_USED

    def test_exported_but_never_imported(self, session):
        declare(session, 'util')
        export(session, 'util')

        [item] = ReachabilityClassifier(session).classify()

        assert item.exported is True
        assert item.reason == REASON_NEVER_IMPORTED

    def test_exported_from_entry_point_is_live(self, session):
        declare(session, 'main', 'src/index.ts')
        export(session, 'main', 'src/index.ts')

        assert ReachabilityClassifier(session).classify() == []

    def test_unexported_declaration_in_entry_point_is_dead(self, session):
        declare(session, 'local', 'src/index.ts')

        [item] = ReachabilityClassifier(session).classify()

        assert item.reason == REASON_NOT_USED

    def test_results_follow_declaration_table_order(self, session):
        for name in ('zeta', 'alpha', 'mid'):
            declare(session, name)

        assert [item.name for item in ReachabilityClassifier(session).classify()] == ['zeta', 'alpha', 'mid']

    def test_classification_is_repeatable(self, session):
        declare(session, 'a')
        declare(session, 'b', 'src/b.ts')
        export(session, 'b', 'src/b.ts')

        classifier = ReachabilityClassifier(session)

        assert classifier.classify() == classifier.classify()

    def test_failing_declaration_is_skipped_and_logged(self, session, caplog, monkeypatch):
        declare(session, 'good')
        declare(session, 'bad')
        classifier = ReachabilityClassifier(session)
        original = classifier.is_imported_elsewhere

        def flaky(name, file_path):
            if name == 'bad':
                raise RuntimeError("boom")
            return original(name, file_path)

        monkeypatch.setattr(classifier, 'is_imported_elsewhere', flaky)

        with caplog.at_level('WARNING', logger='deadwood'):
            items = classifier.classify()

        assert [item.name for item in items] == ['good']
        assert 'bad' in caplog.text
        assert 'boom' in caplog.text


class TestUnusedReason:

    def test_all_reason_codes(self):
        assert get_unused_reason(False, False, False, False) == REASON_NOT_USED
        assert get_unused_reason(False, False, False, True) == REASON_NOT_USED
        assert get_unused_reason(False, False, True, False) == REASON_NEVER_IMPORTED
        assert get_unused_reason(False, False, True, True) == REASON_ENTRY_POINT_INCOMPLETE
        assert get_unused_reason(True, False, False, False) == REASON_UNKNOWN
