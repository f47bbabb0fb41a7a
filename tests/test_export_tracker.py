"""Tests for the export table (phase 4)."""
from deadwood.analyzer.export_tracker import ExportTracker


def exports_of(session, source_file):
    ExportTracker(session).visit_file(source_file)
    return {name: record.export_kind for name, record in session.exports.items()}


class TestExportedDeclarations:

    def test_declaration_kinds(self, source, session):
        code = """
export function api() {}
export class Service {}
export interface Contract {}
export type Id = string;
export const first = 1, second = 2;
"""
        exports = exports_of(session, source(code))

        assert exports == {
            'api': 'function',
            'Service': 'class',
            'Contract': 'interface',
            'Id': 'type',
            'first': 'variable',
            'second': 'variable',
        }

    def test_enums_are_not_recorded(self, source, session):
        exports = exports_of(session, source("export enum Level { Low, High }\n"))

        assert 'Level' not in exports

    def test_ambient_declarations_are_unwrapped(self, source, session):
        exports = exports_of(session, source("export declare function external(): void;\n"))

        assert exports['external'] == 'function'

    def test_default_function_declaration(self, source, session):
        exports = exports_of(session, source("export default function bootstrap() {}\n"))

        assert exports['bootstrap'] == 'function'


class TestExportClauses:

    def test_named_exports_keyed_by_exported_spelling(self, source, session):
        exports = exports_of(session, source("const a = 1, b = 2;\nexport { a, b as renamed };\n"))

        assert exports == {'a': 'named', 'renamed': 'named'}

    def test_re_exports(self, source, session):
        exports = exports_of(session, source("export { helper } from './helpers';\n"))

        assert exports == {'helper': 'named'}


class TestDefaultExports:

    def test_export_default_identifier(self, source, session):
        exports = exports_of(session, source("const app = {};\nexport default app;\n"))

        assert exports == {'app': 'default'}

    def test_export_assignment(self, source, session):
        exports = exports_of(session, source("const legacy = {};\nexport = legacy;\n"))

        assert exports == {'legacy': 'default'}

    def test_default_expression_without_name_is_ignored(self, source, session):
        exports = exports_of(session, source("export default createApp();\n"))

        assert exports == {}


def test_exporting_file_is_recorded(source, session):
    ExportTracker(session).visit_file(source("export const flag = true;\n", 'src/flags.ts'))

    assert session.exports['flag'].exporting_file.name == 'flags.ts'
