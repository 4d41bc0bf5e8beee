"""Annotation comments (`# i18n-tasks-use t('key')`)."""
from i18n_scanner.analyzer.magic_comments import MagicCommentScanner
from i18n_scanner.analyzer.models import SourceUnit
from i18n_scanner.analyzer.scanner import scan
from i18n_scanner.config import ScanConfig

PATH = "test/fixtures/used_keys/app/controllers/a.rb"

SOURCE = """\
# i18n-tasks-use t('translation.from.comment')
SpecialMethod.translate_it
# i18n-tasks-use t('scoped.translation.key1')
I18n.t("scoped.translation.#{variable}")

# i18n-tasks-use t('translation.from.comment2')
# i18n-tasks-use t('translation.from.comment3')
"""


def find(occurrences, key):
    return next(o for o in occurrences if o.resolved_key == key)


class TestMagicComments:

    def test_annotations_attach_to_following_statement(self):
        occurrences = scan(PATH, SOURCE, ScanConfig(strict=True))

        assert len(occurrences) == 4
        assert {o.resolved_key for o in occurrences} == {
            'translation.from.comment',
            'scoped.translation.key1',
            'translation.from.comment2',
            'translation.from.comment3',
        }

        occurrence = find(occurrences, 'translation.from.comment')
        assert occurrence.path == PATH
        assert occurrence.line_num == 2
        assert occurrence.line_text == 'SpecialMethod.translate_it'

        occurrence = find(occurrences, 'scoped.translation.key1')
        assert occurrence.line_num == 4
        assert occurrence.line_text == 'I18n.t("scoped.translation.#{variable}")'

    def test_trailing_annotations_attach_to_last_statement(self):
        occurrences = scan(PATH, SOURCE, ScanConfig(strict=True))

        for key in ('translation.from.comment2', 'translation.from.comment3'):
            occurrence = find(occurrences, key)
            assert occurrence.line_num == 4
            assert occurrence.line_text == 'I18n.t("scoped.translation.#{variable}")'

    def test_magic_occurrences_come_first(self):
        occurrences = scan(PATH, SOURCE)

        assert [o.resolved_key for o in occurrences] == [
            'translation.from.comment',
            'scoped.translation.key1',
            'translation.from.comment2',
            'translation.from.comment3',
            'scoped.translation.#{variable}',
        ]

    def test_annotation_line_number(self):
        source = """\
class Mailer
  def deliver
    # i18n-tasks-use t('k')

    send(:"#{kind}_subject")
  end
end
"""
        occurrences = scan("app/mailers/mailer.rb", source)

        assert [(o.resolved_key, o.line_num) for o in occurrences] == [('k', 5)]
        assert occurrences[0].line_text == 'send(:"#{kind}_subject")'

    def test_scoped_annotation(self):
        source = "# i18n-tasks-use I18n.t('title', scope: %w[admin users])\nrender\n"

        assert [o.resolved_key for o in scan("a.rb", source)] == ['admin.users.title']

    def test_dropped_annotations(self):
        source = """\
# i18n-tasks-use t(dynamic)
# i18n-tasks-use t('.relative')
# i18n-tasks-use t('scoped', scope: runtime)
# i18n-tasks-use t('unbalanced'
# i18n-tasks-use
# unrelated comment t('nope')
render
"""
        assert scan("a.rb", source) == []

    def test_comment_only_file(self):
        unit = SourceUnit("a.rb", "# i18n-tasks-use t('lonely')\n")

        occurrences = MagicCommentScanner(ScanConfig()).scan(unit)

        assert [(o.resolved_key, o.line_num) for o in occurrences] == [('lonely', 1)]

    def test_custom_marker(self):
        source = "# keys-used t('custom.marker')\nrun\n# i18n-tasks-use t('default.marker')\nrun\n"

        occurrences = scan("a.rb", source, ScanConfig(magic_comment_marker="keys-used"))

        assert [o.resolved_key for o in occurrences] == ['custom.marker']
