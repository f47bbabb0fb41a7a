"""Tests for tsconfig discovery, file resolution and parsing."""
import json

import pytest

from deadwood.analyzer.project_loader import (
    ProjectConfigError,
    find_tsconfig,
    load_project,
    load_tsconfig,
    parse_jsonc,
    resolve_source_files,
)


def relative_names(root, paths):
    return [p.relative_to(root.resolve()).as_posix() for p in paths]


class TestJsonc:

    def test_comments_and_trailing_commas(self):
        text = """
{
  // line comment
  "compilerOptions": {
    /* block
       comment */
    "allowJs": true,
  },
}
"""
        assert parse_jsonc(text) == {"compilerOptions": {"allowJs": True}}

    def test_comment_markers_inside_strings_survive(self):
        text = '{"paths": {"@/*": ["src/*"]}, "url": "http://example.com"}'

        assert parse_jsonc(text) == {"paths": {"@/*": ["src/*"]}, "url": "http://example.com"}


class TestFindTsconfig:

    def test_walks_up_from_nested_directory(self, tmp_path):
        (tmp_path / 'tsconfig.json').write_text('{}')
        nested = tmp_path / 'packages' / 'core'
        nested.mkdir(parents=True)

        assert find_tsconfig(nested) == (tmp_path / 'tsconfig.json').resolve()

    def test_missing_config_is_fatal(self, tmp_path, monkeypatch):
        monkeypatch.setattr('deadwood.analyzer.project_loader.TSCONFIG_NAME', 'no-such-tsconfig-name.json')

        with pytest.raises(ProjectConfigError):
            find_tsconfig(tmp_path)


class TestLoadTsconfig:

    def test_invalid_json_is_fatal(self, tmp_path):
        config = tmp_path / 'tsconfig.json'
        config.write_text('{ "compilerOptions": ')

        with pytest.raises(ProjectConfigError):
            load_tsconfig(config)

    def test_non_object_is_fatal(self, tmp_path):
        config = tmp_path / 'tsconfig.json'
        config.write_text('[]')

        with pytest.raises(ProjectConfigError):
            load_tsconfig(config)

    def test_relative_extends_merges_options_and_inherits_include(self, tmp_path):
        (tmp_path / 'configs').mkdir()
        (tmp_path / 'configs' / 'base.json').write_text(json.dumps({
            "compilerOptions": {"allowJs": True, "strict": False},
            "include": ["../lib/**/*"],
        }))
        child = tmp_path / 'tsconfig.json'
        child.write_text(json.dumps({"extends": "./configs/base", "compilerOptions": {"strict": True}}))

        config = load_tsconfig(child)

        assert config.compiler_options == {"allowJs": True, "strict": True}
        assert config.include == ((tmp_path / 'configs').resolve(), ["../lib/**/*"])

    def test_package_extends_is_skipped(self, tmp_path, caplog):
        child = tmp_path / 'tsconfig.json'
        child.write_text(json.dumps({"extends": "@tsconfig/node20/tsconfig.json"}))

        config = load_tsconfig(child)

        assert config.compiler_options == {}
        assert "@tsconfig/node20" in caplog.text

    def test_missing_base_is_fatal(self, tmp_path):
        child = tmp_path / 'tsconfig.json'
        child.write_text(json.dumps({"extends": "./missing.json"}))

        with pytest.raises(ProjectConfigError):
            load_tsconfig(child)

    def test_extends_cycle_is_fatal(self, tmp_path):
        (tmp_path / 'a.json').write_text(json.dumps({"extends": "./b.json"}))
        (tmp_path / 'b.json').write_text(json.dumps({"extends": "./a.json"}))

        with pytest.raises(ProjectConfigError):
            load_tsconfig(tmp_path / 'a.json')


class TestResolveSourceFiles:

    def test_default_include_and_excludes(self, ts_project):
        root = ts_project({
            'src/a.ts': '',
            'src/view.tsx': '',
            'src/types.d.ts': '',
            'src/legacy.js': '',
            'node_modules/pkg/index.ts': '',
            '.cache/tmp.ts': '',
            'README.md': '',
        })

        files = resolve_source_files(load_tsconfig(root / 'tsconfig.json'))

        assert relative_names(root, files) == ['src/a.ts', 'src/view.tsx']

    def test_allow_js_adds_javascript(self, ts_project):
        root = ts_project({'src/a.ts': '', 'src/b.js': '', 'src/c.jsx': ''},
                          tsconfig={"compilerOptions": {"allowJs": True}})

        files = resolve_source_files(load_tsconfig(root / 'tsconfig.json'))

        assert relative_names(root, files) == ['src/a.ts', 'src/b.js', 'src/c.jsx']

    def test_include_exclude_and_out_dir(self, ts_project):
        root = ts_project({
            'src/app.ts': '',
            'src/app.spec.ts': '',
            'scripts/build.ts': '',
            'dist/app.ts': '',
        }, tsconfig={
            "compilerOptions": {"outDir": "dist"},
            "include": ["src", "dist"],
            "exclude": ["**/*.spec.ts"],
        })

        files = resolve_source_files(load_tsconfig(root / 'tsconfig.json'))

        assert relative_names(root, files) == ['src/app.ts']

    def test_files_list_without_include(self, ts_project):
        root = ts_project({'src/a.ts': '', 'src/b.ts': ''}, tsconfig={"files": ["src/b.ts"]})

        files = resolve_source_files(load_tsconfig(root / 'tsconfig.json'))

        assert relative_names(root, files) == ['src/b.ts']


class TestLoadProject:

    def test_parses_every_file_once_in_sorted_order(self, ts_project):
        root = ts_project({'src/z.ts': 'const z = 1;\n', 'src/a.tsx': 'const a = <div />;\n'})

        project = load_project(root)

        assert [f.path.name for f in project.files] == ['a.tsx', 'z.ts']
        assert not project.files[0].root.has_error
        assert project.config_path == (root / 'tsconfig.json').resolve()

    def test_explicit_tsconfig(self, ts_project):
        root = ts_project({'src/a.ts': ''})
        (root / 'tsconfig.build.json').write_text(json.dumps({"include": ["src"]}))

        project = load_project(root, root / 'tsconfig.build.json')

        assert project.config_path.name == 'tsconfig.build.json'

    def test_missing_explicit_tsconfig_is_fatal(self, tmp_path):
        with pytest.raises(ProjectConfigError):
            load_project(tmp_path, tmp_path / 'nope.json')

    def test_syntax_errors_are_warned_not_fatal(self, ts_project, caplog):
        root = ts_project({'src/broken.ts': 'function (( {\n'})

        project = load_project(root)

        assert len(project.files) == 1
        assert 'broken.ts' in caplog.text

    def test_jsonc_tsconfig(self, ts_project):
        root = ts_project({'src/a.ts': ''}, tsconfig='{\n  // comment\n  "compilerOptions": {},\n}\n')

        assert len(load_project(root).files) == 1


class TestSourceFilePosition:

    def test_line_and_column_are_one_based(self, source):
        source_file = source("const a = 1;\nconst b = 2;\n")

        assert source_file.position(0) == (1, 1)
        assert source_file.position(source_file.source.index(b'b')) == (2, 7)

    def test_columns_count_characters_on_multi_byte_lines(self, source):
        source_file = source("const s = 'héllo→';\nconst t = 1;\n")
        offset = source_file.source.index(b';')

        assert source_file.position(offset) == (1, 19)
        assert source_file.position(source_file.source.index(b't =')) == (2, 7)

    def test_line_of_agrees_with_position(self, source):
        source_file = source("\n\nfunction late() {}\n")
        node = source_file.root.named_children[0]

        assert source_file.line_of(node) == source_file.position(node.start_byte)[0] == 3
