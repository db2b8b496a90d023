"""
Tests for shkit.lib.log_lib building blocks.

Covers the level registry (ordering, filtering, ad hoc levels, shared
label width), the formatter (padding, styling, ANSI stripping), the
destination table (routing, output specs, files) and the stack tracer.

Dispatcher behaviour lives in test_logger.py.
"""

import io

import pytest

from shkit.lib.log_lib import (
    ALL,
    DestinationTable,
    FixedTracer,
    Formatter,
    LevelRegistry,
    LogConfigError,
    Record,
    StackFrame,
    StackTracer,
    format_level_list,
    parse_level_list,
    parse_output_spec,
    strip_ansi,
)
from shkit.lib.log_lib import stack as _stack_mod
from shkit.lib.log_lib.levels import (
    ABORT, ADVISORY, FATAL_CLASS, INFORMATIONAL, NONE, RETURN, WARNING,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def registry():
    """A fresh LevelRegistry (min level INFO)."""
    return LevelRegistry()


@pytest.fixture
def formatter(registry):
    return Formatter(registry)


@pytest.fixture
def table(registry, out_buf, err_buf):
    t = DestinationTable(registry, stdout=out_buf, stderr=err_buf)
    yield t
    t.close()


# =============================================================================
# Level Registry
# =============================================================================

class TestBuiltinLevels:
    """Built-in levels are pre-seeded with fixed ranks and classes."""

    def test_builtin_ordering(self, registry):
        """DEBUG < RUN < INFO < WARN < ERROR < FATAL < QUIT."""
        assert registry.names() == [
            'DEBUG', 'RUN', 'INFO', 'WARN', 'ERROR', 'FATAL', 'QUIT',
        ]

    def test_severity_classes(self, registry):
        """Classes: informational, warning, fatal."""
        for name in ('DEBUG', 'RUN', 'INFO'):
            assert registry.severity_class(name) == INFORMATIONAL
        assert registry.severity_class('WARN') == WARNING
        for name in ('ERROR', 'FATAL', 'QUIT'):
            assert registry.severity_class(name) == FATAL_CLASS

    def test_actions(self, registry):
        """ERROR returns a status, FATAL aborts, QUIT is advisory."""
        assert registry.get('INFO').action == NONE
        assert registry.get('WARN').action == NONE
        assert registry.get('ERROR').action == RETURN
        assert registry.get('FATAL').action == ABORT
        assert registry.get('QUIT').action == ADVISORY

    def test_only_fatal_and_quit_are_traced(self, registry):
        traced = [lvl.name for lvl in registry if lvl.traced]
        assert traced == ['FATAL', 'QUIT']

    def test_initial_label_width(self, registry):
        """Longest built-in label is five characters (DEBUG/ERROR/FATAL)."""
        assert registry.label_width() == 5


class TestFiltering:
    """Minimum-level filter."""

    def test_default_filter_is_info(self, registry):
        assert registry.min_level == 'INFO'
        assert registry.is_enabled('DEBUG') is False
        assert registry.is_enabled('INFO') is True
        assert registry.is_enabled('QUIT') is True

    def test_run_filters_like_info(self, registry):
        """RUN stays visible at the default threshold, hidden above INFO."""
        assert registry.is_enabled('RUN') is True
        registry.min_level = 'WARN'
        assert registry.is_enabled('RUN') is False
        assert registry.is_enabled('INFO') is False
        assert registry.is_enabled('WARN') is True

    def test_debug_threshold_shows_everything(self, registry):
        registry.min_level = 'debug'
        assert registry.min_level == 'DEBUG'
        assert all(registry.is_enabled(name) for name in registry.names())

    def test_user_level_enabled_at_default(self, registry):
        """Ad hoc levels rank just above INFO."""
        assert registry.is_enabled('FOOBAR') is True
        registry.min_level = 'WARN'
        assert registry.is_enabled('FOOBAR') is False

    @pytest.mark.parametrize("name", ["WARNN", "NEVER_SEEN"])
    def test_unknown_min_level_rejected(self, registry, name):
        with pytest.raises(LogConfigError, match="unknown minimum level"):
            registry.min_level = name
        assert registry.min_level == 'INFO'
        assert name not in registry
        assert registry.is_enabled('INFO') is True

    def test_registered_user_level_as_min_level(self, registry):
        registry.register('FOOBAR')
        registry.min_level = 'foobar'
        assert registry.is_enabled('INFO') is False
        assert registry.is_enabled('FOOBAR') is True

    def test_unknown_min_level_at_construction(self):
        with pytest.raises(LogConfigError):
            LevelRegistry('WARNN')


class TestRegister:
    """Ad hoc level registration."""

    def test_register_is_idempotent(self, registry):
        first = registry.register('FOOBAR')
        again = registry.register('foobar', label='something else', rank_hint=5)
        assert again is first
        assert again.label == 'FOOBAR'

    def test_user_levels_rank_after_informational(self, registry):
        """New levels go after the highest informational rank, before WARN."""
        a = registry.register('ALPHA')
        b = registry.register('BETA')
        assert registry.get('INFO').rank < a.rank < b.rank < registry.get('WARN').rank
        assert registry.names().index('BETA') == registry.names().index('WARN') - 1

    def test_rank_hint(self, registry):
        lvl = registry.register('TRACE', rank_hint=50)
        assert registry.names()[0] == 'TRACE'
        assert lvl.rank == 50

    def test_names_are_normalized(self, registry):
        assert registry.register(' info ') is registry.get('INFO')

    @pytest.mark.parametrize("bad", ["", "  ", "two words", "A,B", "9LIVES"])
    def test_invalid_names_rejected(self, registry, bad):
        with pytest.raises(LogConfigError):
            registry.register(bad)

    def test_get_unknown_returns_none(self, registry):
        assert registry.get('NOPE') is None
        assert 'NOPE' not in registry
        assert 'INFO' in registry

    @pytest.mark.parametrize("name", ["DB_ERROR", "db_error", "FATALITY", "ERRORS"])
    def test_error_like_names_are_fatal_class(self, registry, name):
        lvl = registry.register(name)
        assert registry.severity_class(name) == FATAL_CLASS
        assert lvl.action == RETURN
        assert lvl.traced is False

    def test_error_like_names_rank_above_error(self, registry):
        a = registry.register('DB_ERROR')
        b = registry.register('NET_FATAL')
        assert registry.get('ERROR').rank < a.rank < b.rank < registry.get('FATAL').rank
        registry.min_level = 'ERROR'
        assert registry.is_enabled('DB_ERROR') is True

    def test_plain_user_names_stay_informational(self, registry):
        registry.register('NOTICE')
        assert registry.severity_class('NOTICE') == INFORMATIONAL
        assert registry.get('NOTICE').action == NONE

    def test_explicit_severity_wins(self, registry):
        registry.register('SOFT_ERROR', severity=WARNING)
        assert registry.severity_class('SOFT_ERROR') == WARNING


class TestLabelWidth:
    """Shared label width grows monotonically."""

    def test_longer_level_widens(self, registry):
        registry.register('FOOBAR')
        assert registry.label_width() == 6

    def test_equal_length_level_keeps_width(self, registry):
        registry.register('ABCDE')
        assert registry.label_width() == 5

    def test_relabel_never_shrinks(self, registry):
        registry.relabel('INFO', 'INFORMATION')
        assert registry.label_width() == 11
        registry.relabel('INFO', 'I')
        assert registry.label_width() == 11
        assert registry.get('INFO').label == 'I'


class TestFormatLevelList:

    def test_lists_all_levels_and_marks_minimum(self, registry):
        registry.register('FOOBAR')
        listing = format_level_list(registry)
        for name in registry.names():
            assert name in listing
        assert '*INFO' in listing


# =============================================================================
# Formatter
# =============================================================================

class TestRender:
    """Label padding and styling."""

    @pytest.mark.parametrize("level,message,expected", [
        ('INFO', 'FYI', 'INFO  FYI'),
        ('RUN', 'echo foo', 'RUN   echo foo'),
        ('WARN', 'watch out', 'WARN  watch out'),
        ('ERROR', 'uh-oh', 'ERROR uh-oh'),
        ('FATAL', 'oh noes!', 'FATAL oh noes!'),
    ])
    def test_plain_padding(self, formatter, level, message, expected):
        assert formatter.render_line(level, message) == expected

    def test_padding_follows_widest_label(self, formatter, registry):
        registry.register('FOOBAR')
        assert formatter.render_line('INFO', 'x') == 'INFO   x'
        assert formatter.render_line('FOOBAR', 'x') == 'FOOBAR x'

    def test_timestamp_between_label_and_message(self, formatter):
        line = formatter.render_line('INFO', 'hello', timestamp='12:00:00')
        assert line == 'INFO  12:00:00 hello'

    def test_styled_warn_wraps_label(self, formatter):
        styled, plain = formatter.render('WARN', 'watch out')
        assert styled == '\x1b[33mWARN\x1b[0m  watch out'
        assert plain == 'WARN  watch out'

    def test_info_is_unstyled(self, formatter):
        styled, plain = formatter.render('INFO', 'FYI')
        assert styled == plain

    def test_strip_of_styled_equals_plain(self, formatter, registry):
        registry.register('FOOBAR', severity=WARNING)
        for name in registry.names():
            styled, plain = formatter.render(name, 'message [1] here')
            assert strip_ansi(styled) == plain

    def test_user_level_style_falls_back_to_class(self, formatter, registry):
        registry.register('NOTICE', severity=WARNING)
        assert formatter.style_for('NOTICE') == '33'
        assert formatter.style_for('FOOBAR') == ''

    def test_custom_styles(self, registry):
        f = Formatter(registry, styles={'info': '32'})
        assert f.render_line('INFO', 'ok', styled=True) == '\x1b[32mINFO\x1b[0m  ok'

    def test_plain_strips_ansi_in_message(self, formatter):
        line = formatter.render_line('INFO', '\x1b[1mbold\x1b[0m text')
        assert line == 'INFO  bold text'


class TestStripAnsi:

    def test_removes_sgr_sequences(self):
        assert strip_ansi('\x1b[1;31mFATAL\x1b[0m oops') == 'FATAL oops'

    def test_removes_bare_reset(self):
        assert strip_ansi('a\x1b[mb') == 'ab'

    def test_idempotent(self):
        text = '\x1b[33mWARN\x1b[0m [x] \x1b[35mq\x1b[0m'
        assert strip_ansi(strip_ansi(text)) == strip_ansi(text)

    def test_literal_brackets_survive(self):
        text = 'array[31m] and [0m and \x1b[not-a-code'
        assert strip_ansi(text) == text


class TestRecord:

    def test_text_is_cached_per_style(self, formatter):
        rec = Record(formatter, 'WARN', 'careful')
        assert rec.text() == 'WARN  careful\n'
        rec.text()
        rec.text(styled=True)
        rec.text(styled=True)
        assert rec.render_count == 2

    def test_trace_block_appended(self, formatter):
        rec = Record(formatter, 'FATAL', 'oh noes!', trace='  at main (demo.sh:7)')
        assert rec.text() == 'FATAL oh noes!\n  at main (demo.sh:7)\n'


# =============================================================================
# Output specs
# =============================================================================

class TestParseOutputSpec:
    """Test parse_output_spec()."""

    def test_path_only(self):
        spec = parse_output_spec('build.log')
        assert spec.path == 'build.log'
        assert spec.levels == ALL

    def test_path_and_levels(self):
        spec = parse_output_spec('errors.log:ERROR,FATAL')
        assert spec.path == 'errors.log'
        assert spec.levels == 'ERROR,FATAL'

    def test_colon_in_path_without_levels(self):
        spec = parse_output_spec('/tmp/a:b.log')
        assert spec.path == '/tmp/a:b.log'
        assert spec.levels == ALL

    def test_windows_drive_letter(self):
        spec = parse_output_spec('C:\\logs\\out.log')
        assert spec.path == 'C:\\logs\\out.log'
        assert spec.levels == ALL

    def test_windows_drive_letter_with_levels(self):
        spec = parse_output_spec('C:\\logs\\out.log:INFO')
        assert spec.path == 'C:\\logs\\out.log'
        assert spec.levels == 'INFO'

    def test_empty_path_rejected(self):
        with pytest.raises(LogConfigError):
            parse_output_spec(':INFO')


class TestParseLevelList:

    def test_all_sentinel(self):
        assert parse_level_list('ALL') is None
        assert parse_level_list('all') is None
        assert parse_level_list(None) is None

    def test_comma_list(self):
        assert parse_level_list('ERROR, fatal') == ['ERROR', 'fatal']

    def test_sequence(self):
        assert parse_level_list(['INFO', 'WARN']) == ['INFO', 'WARN']

    @pytest.mark.parametrize("bad", ["", "INFO,,WARN", ","])
    def test_empty_names_rejected(self, bad):
        with pytest.raises(LogConfigError):
            parse_level_list(bad)


# =============================================================================
# Destination Table
# =============================================================================

class TestConsoleRouting:

    def test_informational_to_stdout(self, table):
        assert table.resolve('INFO')[0] is table.stdout
        assert table.resolve('RUN')[0] is table.stdout
        assert table.resolve('FOOBAR')[0] is table.stdout

    def test_warning_and_fatal_to_stderr(self, table):
        for name in ('WARN', 'ERROR', 'FATAL', 'QUIT'):
            assert table.resolve(name)[0] is table.stderr

    def test_error_like_user_level_to_stderr(self, table):
        assert table.resolve('DB_ERROR')[0] is table.stderr
        assert table.resolve('DB_NOTE')[0] is table.stdout

    def test_unpinned_console_follows_sys_streams(self, registry, capsys):
        t = DestinationTable(registry)
        t.stdout.write('to out\n')
        t.stderr.write('to err\n')
        captured = capsys.readouterr()
        assert captured.out == 'to out\n'
        assert captured.err == 'to err\n'


class TestAddOutputFile:

    def test_all_levels(self, table, tmp_path):
        dest = table.add_output_file(tmp_path / 'all.log')
        assert dest.levels is None
        assert all(dest.accepts(name) for name in ('DEBUG', 'QUIT', 'ANY'))

    def test_level_subset(self, table, tmp_path):
        dest = table.add_output_file(tmp_path / 'err.log', 'ERROR,fatal')
        assert dest.levels == frozenset({'ERROR', 'FATAL'})
        assert dest.accepts('FATAL')
        assert not dest.accepts('WARN')

    def test_unknown_level_registered(self, table, registry, tmp_path):
        table.add_output_file(tmp_path / 'foo.log', 'FOOBAR')
        assert 'FOOBAR' in registry
        assert registry.label_width() == 6

    def test_resolve_keeps_registration_order(self, table, tmp_path):
        a = table.add_output_file(tmp_path / 'a.log')
        b = table.add_output_file(tmp_path / 'b.log', 'INFO')
        c = table.add_output_file(tmp_path / 'c.log', 'WARN')
        assert table.resolve('INFO') == [table.stdout, a, b]
        assert table.resolve('WARN') == [table.stderr, a, c]

    def test_same_path_merges_levels(self, table, tmp_path):
        first = table.add_output_file(tmp_path / 'x.log', 'INFO')
        second = table.add_output_file(tmp_path / 'x.log', 'WARN')
        assert second is first
        assert first.levels == frozenset({'INFO', 'WARN'})
        assert len(table.files) == 1

    def test_same_path_with_all_widens_to_all(self, table, tmp_path):
        dest = table.add_output_file(tmp_path / 'x.log', 'INFO')
        table.add_output_file(tmp_path / 'x.log')
        assert dest.levels is None

    def test_appends_to_existing_file(self, table, tmp_path):
        path = tmp_path / 'old.log'
        path.write_text('previous\n', encoding='utf-8')
        dest = table.add_output_file(path)
        dest.write('next\n')
        assert path.read_text(encoding='utf-8') == 'previous\nnext\n'

    def test_unopenable_path_raises(self, table, tmp_path):
        with pytest.raises(LogConfigError, match='cannot open log file'):
            table.add_output_file(tmp_path / 'missing' / 'dir' / 'x.log')

    def test_close_closes_files(self, table, tmp_path):
        dest = table.add_output_file(tmp_path / 'x.log')
        table.close()
        assert dest.stream.closed
        assert table.files == []


class TestWantsStyle:

    def test_stringio_is_plain(self, table):
        assert table.stdout.wants_style() is False

    def test_global_force(self, table):
        assert table.stdout.wants_style(force=True) is True

    def test_recorded_force_format(self, table, tmp_path):
        dest = table.add_output_file(tmp_path / 'color.log', force_format=True)
        assert dest.wants_style() is True

    def test_tty_stream_is_styled(self, registry):
        class FakeTTY(io.StringIO):
            def isatty(self):
                return True

        t = DestinationTable(registry, stdout=FakeTTY())
        assert t.stdout.wants_style() is True


# =============================================================================
# Stack Tracer
# =============================================================================

def _capture_from_helper(tracer):
    return tracer.capture()


class TestStackTracer:

    def test_capture_starts_at_caller(self):
        frames = _capture_from_helper(StackTracer())
        assert frames[0].function == '_capture_from_helper'
        assert frames[1].function == 'test_capture_starts_at_caller'
        assert frames[0].filename.endswith('test_log_lib.py')

    def test_frames_run_outward(self):
        frames = StackTracer().capture()
        assert frames[0].function == 'test_frames_run_outward'
        assert frames[0].lineno > 0
        assert len(frames) > 1

    def test_basename(self):
        frames = StackTracer(basename=True).capture()
        assert frames[0].filename == 'test_log_lib.py'

    def test_render_one_line_per_frame(self):
        frames = [StackFrame('inner', 'lib.sh', 3), StackFrame('main', 'demo.sh', 7)]
        text = StackTracer().render(frames)
        assert text == '  at inner (lib.sh:3)\n  at main (demo.sh:7)'

    def test_render_indent(self):
        text = StackTracer(indent='    ').render([StackFrame('main', 'x.sh', 1)])
        assert text == '    at main (x.sh:1)'

    def test_capture_is_deterministic(self):
        def twice():
            t = StackTracer()
            return t.capture(), t.capture()

        first, second = twice()
        assert [(f.function, f.filename) for f in first] == \
               [(f.function, f.filename) for f in second]

    def test_fixed_tracer(self):
        tracer = FixedTracer([StackFrame('main', 'demo.sh', 7)])
        assert tracer.capture() == [StackFrame('main', 'demo.sh', 7)]
        assert tracer.render(tracer.capture()) == '  at main (demo.sh:7)'


class TestHiddenModules:

    @pytest.fixture(autouse=True)
    def _restore_hidden(self, monkeypatch):
        monkeypatch.setattr(_stack_mod, '_HIDDEN_MODULES',
                            set(_stack_mod._HIDDEN_MODULES))

    def _wrapper_in(self, module_name):
        namespace = {'__name__': module_name}
        exec("def wrapper(tracer):\n    return tracer.capture()\n", namespace)
        return namespace['wrapper']

    def test_log_lib_frames_hidden(self):
        assert 'shkit.lib.log_lib' in _stack_mod._HIDDEN_MODULES

    def test_hidden_module_frames_skipped(self):
        _stack_mod.hide_module('fakewrap')
        frames = self._wrapper_in('fakewrap')(StackTracer())
        assert frames[0].function == 'test_hidden_module_frames_skipped'

    def test_submodules_hidden_too(self):
        _stack_mod.hide_module('fakewrap')
        frames = self._wrapper_in('fakewrap.sub')(StackTracer())
        assert frames[0].function == 'test_submodules_hidden_too'

    def test_prefix_without_dot_not_hidden(self):
        _stack_mod.hide_module('fakewrap')
        frames = self._wrapper_in('fakewrapper')(StackTracer())
        assert frames[0].function == 'wrapper'
