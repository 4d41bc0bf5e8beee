"""Parser adapter and tree entry point tests."""
from pathlib import Path

import pytest

from i18n_scanner.analyzer.errors import ScanError, SourceSyntaxError
from i18n_scanner.analyzer.parser import RubyParser
from i18n_scanner.analyzer.scanner import scan, scan_file, scan_tree

FIXTURES = Path(__file__).parent / "fixtures"


class TestRubyParser:

    def test_parses_valid_source(self):
        tree = RubyParser().parse_source("class A\n  def b; t('c'); end\nend\n")

        assert tree.root_node.type == 'program'
        assert not tree.root_node.has_error

    def test_unclosed_file_is_a_syntax_error(self):
        with pytest.raises(SourceSyntaxError) as exc_info:
            scan_file(FIXTURES / "broken" / "unclosed.rb")

        error = exc_info.value
        assert isinstance(error, SyntaxError)
        assert isinstance(error, ScanError)
        assert error.path.endswith("unclosed.rb")
        assert error.line is not None
        assert error.lineno == error.line
        assert "syntax error" in str(error)

    def test_scan_propagates_syntax_errors(self):
        with pytest.raises(SourceSyntaxError) as exc_info:
            scan("lib/broken.rb", "def foo(\n  t('a')\n")

        assert str(exc_info.value).startswith("lib/broken.rb:")

    @pytest.mark.parametrize("name,expected", [
        ("app/models/user.rb", True),
        ("lib/tasks/seed.rake", True),
        ("config.ru", True),
        ("app/views/users/show.json.jbuilder", True),
        ("app/views/users/show.html.erb", False),
        ("README.md", False),
    ])
    def test_handles(self, name, expected):
        assert RubyParser.handles(name) is expected


class TestScanTree:

    SOURCE = "class PagesController\n  def home\n    t('.title')\n  end\nend\n"

    def test_matches_text_scan(self):
        path = "app/controllers/pages_controller.rb"
        tree = RubyParser().parse_source(self.SOURCE)

        assert scan_tree(path, tree, text=self.SOURCE) == scan(path, self.SOURCE)

    def test_recovers_text_from_tree(self):
        path = "app/controllers/pages_controller.rb"
        tree = RubyParser().parse_source("\n\n" + self.SOURCE)

        occurrences = scan_tree(path, tree)

        assert [o.resolved_key for o in occurrences] == ['pages.home.title']
        assert occurrences[0].line_num == 5
        assert occurrences[0].line_text == "t('.title')"

    def test_rejects_broken_tree(self):
        tree = RubyParser().parser.parse(b"class Broken\n  def x\n")

        with pytest.raises(SourceSyntaxError):
            scan_tree("broken.rb", tree)


def test_scan_file_reads_fixture():
    path = FIXTURES / "app" / "controllers" / "admin" / "reports_controller.rb"

    occurrences = scan_file(path)

    assert [(o.resolved_key, o.line_num) for o in occurrences] == [
        ('admin.reports.flash.generated', 4),
        ('admin.reports.index.title', 5),
        ('admin.reports.flash.generated', 6),
    ]
    assert all(o.path == str(path) for o in occurrences)
