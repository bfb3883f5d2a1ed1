"""Indentation-expectation state machine.

Consumes the dispatcher's events for one file and predicts, for every
physical line, the column its first token should sit at.

Token events adjust the nesting state as they arrive; keywords and groups
join the current line's frame, closers release frames, continuation
keywords pull the current line back one unit. At each line boundary the
machine detects trailing continuations (operator, comma, method chain),
applies the pending deltas, measures the line and moves on.

Example:
    >>> from tailor.dispatch import Dispatcher
    >>> from tailor.lexer import tokenize
    >>> machine = IndentationStateMachine(spaces=2)
    >>> dispatcher = Dispatcher()
    >>> machine.subscribe(dispatcher)
    >>> dispatcher.run(tokenize("def foo\\n    true\\nend\\n"))
    >>> [(m.line, m.actual, m.expected) for m in machine.measurements]
    [(2, 4, 2)]

Thread Safety:
One machine per file. Instances are not shared between threads.

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tailor.errors import StateInvariantViolation
from tailor.indentation.keywords import (
    KEYWORDS_TO_INDENT,
    is_continuation_keyword,
    is_endless_def,
    is_loop_do,
    is_trailing_modifier,
)
from tailor.indentation.state import Group, IndentationState, IndentFrame, Opener
from tailor.tokens import Token, TokenKind
from tailor.utils.logger import get_logger

if TYPE_CHECKING:
    from tailor.dispatch import Dispatcher, Event
    from tailor.line import LineView

logger = get_logger(__name__)

_ALIGNABLE_KINDS = frozenset({TokenKind.LPAREN, TokenKind.LBRACKET})
_ALIGNMENT_CLOSERS = frozenset({TokenKind.RPAREN, TokenKind.RBRACKET})


@dataclass(frozen=True, slots=True)
class Measurement:
    """A line whose indentation differs from the expectation.

    Attributes:
        line: Line number
        actual: Column of the line's first non-whitespace token
        expected: Column it should be at

    """

    line: int
    actual: int
    expected: int


class IndentationStateMachine:
    """Tracks nesting and continuation state and measures each line.

    Args:
        spaces: Columns per indent unit
        argument_alignment: Align continuation lines of a parenthesized or
            bracketed argument list to the column after the opener
        strict: Raise StateInvariantViolation on unbalanced closers instead
            of logging them

    """

    __slots__ = ("spaces", "argument_alignment", "strict", "state", "measurements")

    def __init__(
        self,
        spaces: int = 2,
        argument_alignment: bool = False,
        strict: bool = False,
    ) -> None:
        self.spaces = spaces
        self.argument_alignment = argument_alignment
        self.strict = strict
        self.state = IndentationState()
        self.measurements: list[Measurement] = []

    def subscribe(self, dispatcher: Dispatcher) -> None:
        """Register every event handler with ``dispatcher``."""
        for name in _HANDLED_EVENTS:
            dispatcher.register(name, getattr(self, name))

    # =========================================================================
    # Suspend / resume
    # =========================================================================

    def start(self) -> None:
        """Resume measuring."""
        logger.debug("Starting indentation measurement; expecting %d", self.state.expected_this_line)
        self.state.running = True

    def stop(self) -> None:
        """Suspend measuring. State keeps tracking the source."""
        logger.debug("Stopping indentation measurement")
        self.state.running = False

    @property
    def running(self) -> bool:
        return self.state.running

    # =========================================================================
    # Token events
    # =========================================================================

    def on_keyword(self, event: Event) -> None:
        token, view = event.token, event.line
        if token.text == "end":
            self._close_block(token, view)
            return
        if token.text not in KEYWORDS_TO_INDENT:
            return

        tokens = view.tokens
        if is_trailing_modifier(tokens, token):
            logger.debug("%d: '%s' used as a modifier", token.line, token.text)
            return
        if is_loop_do(tokens, token):
            logger.debug("%d: 'do' belongs to a loop header", token.line)
            return

        state = self.state
        state.indent_keyword_line = token.line

        if is_continuation_keyword(token):
            if view.first_non_space is token:
                logger.debug("%d: continuation keyword '%s'", token.line, token.text)
                state.expected_this_line = max(0, state.expected_this_line - self.spaces)
            return

        opener = Opener(token.text, token.line, self._open_item(), token.column)
        state.keyword_lines.append(opener)

    def on_left_paren(self, event: Event) -> None:
        self._open_group(event.token)

    def on_left_bracket(self, event: Event) -> None:
        self._open_group(event.token)

    def on_left_brace(self, event: Event) -> None:
        self._open_group(event.token)

    def on_right_paren(self, event: Event) -> None:
        self._close_group(event.token, event.line)

    def on_right_bracket(self, event: Event) -> None:
        self._close_group(event.token, event.line)

    def on_right_brace(self, event: Event) -> None:
        state = self.state
        if state.embexpr_brace_depths and state.embexpr_brace_depths[-1] == len(state.brace_lines):
            # Closes a string interpolation, not a hash or block
            state.embexpr_brace_depths.pop()
            return
        self._close_group(event.token, event.line)

    def on_embedded_expr_begin(self, event: Event) -> None:
        self.state.embexpr_brace_depths.append(len(self.state.brace_lines))

    def on_embedded_expr_end(self, event: Event) -> None:
        depths = self.state.embexpr_brace_depths
        if depths and depths[-1] == len(self.state.brace_lines):
            depths.pop()

    def on_string_begin(self, event: Event) -> None:
        self.state.string_nesting.append(event.token.line)

    def on_string_end(self, event: Event) -> None:
        self._pop(self.state.string_nesting, event.token)

    # =========================================================================
    # Line boundaries
    # =========================================================================

    def on_newline(self, event: Event) -> None:
        self._record(self.end_of_line(event.line))

    def on_ignored_newline(self, event: Event) -> None:
        self._record(self.end_of_line(event.line))

    def end_of_line(self, view: LineView) -> Measurement | None:
        """Finish a line: detect continuations, apply deltas, measure, transition.

        Args:
            view: The finished line batch

        Returns:
            A Measurement if the line is misindented, else None.
        """
        state = self.state
        self._close_endless_definitions(view)

        if view.only_spaces() or view.comment_only() or view.is_string_tail():
            self._carry_trackers(view)
        else:
            self._update_period_chain(view)
            if state.in_group() or state.in_string():
                self._carry_trackers(view)
            else:
                self._update_op_continuation(view)
                self._update_comma_continuation(view)

        self._settle_alignment(view)

        if state.line_frame.open_count > 0:
            state.open_frames.append(state.line_frame)
            state.pending_delta_next_line += 1

        self._apply_deltas()
        measurement = self._measure(view)
        self._transition(view)
        return measurement

    # =========================================================================
    # Items and frames
    # =========================================================================

    def _open_item(self) -> IndentFrame:
        frame = self.state.line_frame
        frame.open_count += 1
        return frame

    def _close_item(self, frame: IndentFrame, leads: bool) -> None:
        """Close one item of ``frame``, releasing the frame with its last item.

        Args:
            frame: Frame the item belongs to
            leads: The closer leads its line, so the line itself dedents
        """
        frame.open_count -= 1
        if frame is self.state.line_frame or frame.open_count > 0:
            return

        state = self.state
        try:
            state.open_frames.remove(frame)
        except ValueError:
            self._violation(f"frame from line {frame.start_line} released twice")
            return

        state.pending_delta_next_line -= 1
        if leads:
            state.pending_delta_this_line -= 1

    def _open_group(self, token: Token) -> None:
        state = self.state
        state.group_counter += 1
        group = Group(
            kind=token.kind,
            start_line=token.line,
            column=token.column,
            frame=self._open_item(),
            align_column=token.column + 1 if token.kind in _ALIGNABLE_KINDS else None,
            order=state.group_counter,
        )
        state.stack_for(token.kind).append(group)

    def _close_group(self, token: Token, view: LineView) -> None:
        group = self._pop(self.state.stack_for(token.kind), token)
        if group is not None:
            self._close_item(group.frame, view.leads_line(token))

    def _close_block(self, token: Token, view: LineView) -> None:
        opener = self._pop(self.state.keyword_lines, token)
        if opener is None:
            return
        if opener.frame is self.state.line_frame:
            logger.debug("%d: single-line '%s' statement", token.line, opener.keyword)
        self._close_item(opener.frame, view.leads_line(token))

    def _close_endless_definitions(self, view: LineView) -> None:
        """Take back the item of every ``def`` on this line that has no body."""
        state = self.state
        if not (self._keyword_opened_this_line() and view.contains_keyword_to_indent()):
            return
        for token in view.tokens:
            if not is_endless_def(view.tokens, token):
                continue
            for opener in reversed(state.keyword_lines):
                if opener.frame is not state.line_frame:
                    break
                position = (opener.start_line, opener.column)
                if opener.keyword == "def" and position == (token.line, token.column):
                    logger.debug("%d: endless method definition", token.line)
                    state.keyword_lines.remove(opener)
                    self._close_item(opener.frame, leads=False)
                    break

    def _keyword_opened_this_line(self) -> bool:
        keyword_lines = self.state.keyword_lines
        return bool(keyword_lines) and keyword_lines[-1].frame is self.state.line_frame

    # =========================================================================
    # Continuations
    # =========================================================================

    def _carry_trackers(self, view: LineView) -> None:
        """Keep op/comma continuations alive across a line that cannot end them."""
        state = self.state
        previous = view.lineno - 1
        if state.op_continuation_start_line and state.op_continuation_start_line[-1] == previous:
            state.op_continuation_start_line[-1] = view.last_lineno
        if state.last_comma_continuation_line == previous:
            state.last_comma_continuation_line = view.last_lineno

    def _update_op_continuation(self, view: LineView) -> None:
        state = self.state
        if view.ends_with_op():
            if state.op_continuation_start_line:
                state.op_continuation_start_line[-1] = view.last_lineno
                return
            state.op_continuation_start_line.append(view.last_lineno)
            if self._keyword_opened_this_line():
                state.in_keyword_plus_op = True
            else:
                state.op_frame = self._open_item()
            logger.debug("%d: multi-line operator statement", view.lineno)
            return

        if state.op_continuation_start_line:
            logger.debug("%d: end of multi-line operator statement", view.lineno)
            state.op_continuation_start_line.clear()
            if not state.in_keyword_plus_op and state.op_frame is not None:
                self._close_item(state.op_frame, leads=False)
            state.op_frame = None
            state.in_keyword_plus_op = False

    def _update_comma_continuation(self, view: LineView) -> None:
        state = self.state
        if view.ends_with_comma():
            if state.last_comma_continuation_line is None:
                if self._keyword_opened_this_line():
                    state.in_keyword_plus_comma = True
                else:
                    state.comma_frame = self._open_item()
                logger.debug("%d: multi-line comma statement", view.lineno)
            state.last_comma_continuation_line = view.last_lineno
            return

        if state.last_comma_continuation_line is not None:
            logger.debug("%d: end of multi-line comma statement", view.lineno)
            state.last_comma_continuation_line = None
            if not state.in_keyword_plus_comma and state.comma_frame is not None:
                self._close_item(state.comma_frame, leads=False)
            state.comma_frame = None
            state.in_keyword_plus_comma = False

    def _update_period_chain(self, view: LineView) -> None:
        """Track method chains split across lines.

        A chain starts on a line ending with a period, or on a line starting
        with one (which also indents that line). Every following line that
        starts with a period or follows a trailing period belongs to the
        chain; the first line that does neither ends it and dedents itself.
        Lines nested inside blocks or groups opened within the chain are
        skipped, and no chain starts inside an open group or string.
        """
        state = self.state
        if state.period_chain_open:
            if state.line_start_frame is not state.period_frame:
                return
            if view.starts_with_period() or state.period_trailing:
                state.last_period_continuation_line = view.last_lineno
                state.period_trailing = view.ends_with_period()
                return
            self._end_period_chain(view)

        if view.starts_with_period():
            if state.line_started_nested:
                return
            logger.debug("%d: method chain begins with a leading period", view.lineno)
            state.expected_this_line += self.spaces
            frame = IndentFrame(view.lineno, 1)
            state.open_frames.append(frame)
            state.pending_delta_next_line += 1
            self._begin_period_chain(view, frame)
        elif view.ends_with_period() and not (state.in_group() or state.in_string()):
            logger.debug("%d: method chain begins with a trailing period", view.lineno)
            if self._keyword_opened_this_line():
                state.in_keyword_plus_period = True
            else:
                self._open_item()
            self._begin_period_chain(view, state.line_frame)

    def _begin_period_chain(self, view: LineView, frame: IndentFrame) -> None:
        state = self.state
        state.period_chain_open = True
        state.period_frame = frame
        state.last_period_continuation_line = view.last_lineno
        state.period_trailing = view.ends_with_period()

    def _end_period_chain(self, view: LineView) -> None:
        state = self.state
        logger.debug("%d: end of method chain", view.lineno)
        if not state.in_keyword_plus_period and state.period_frame is not None:
            self._close_item(state.period_frame, leads=True)
        state.period_chain_open = False
        state.period_frame = None
        state.period_trailing = False
        state.last_period_continuation_line = None
        state.in_keyword_plus_period = False

    # =========================================================================
    # Transition and measurement
    # =========================================================================

    def _settle_alignment(self, view: LineView) -> None:
        """Drop the alignment column of a group whose opener ends its line."""
        group = self.state.innermost_group()
        if group is None or group.align_column is None:
            return
        significant = view.significant
        if significant and significant[-1].kind is group.kind and (
            significant[-1].line == group.start_line and significant[-1].column == group.column
        ):
            group.align_column = None

    def _apply_deltas(self) -> None:
        state = self.state
        unit = self.spaces
        state.expected_next_line = max(
            0, state.expected_next_line + state.pending_delta_next_line * unit
        )
        if state.pending_delta_this_line < 0:
            state.expected_this_line = max(
                0, state.expected_this_line + state.pending_delta_this_line * unit
            )

    def _measure(self, view: LineView) -> Measurement | None:
        state = self.state
        first = view.first_non_space
        if first is None or view.is_string_tail() or view.is_embedded_document():
            return None

        state.actual_indentation = first.column
        if not state.running:
            return None

        expected = state.expected_this_line
        if (
            self.argument_alignment
            and state.align_column is not None
            and first.kind not in _ALIGNMENT_CLOSERS
        ):
            expected = state.align_column

        if first.column == expected:
            return None
        logger.debug(
            "%d: indented to %d, expected %d", view.lineno, first.column, expected
        )
        return Measurement(view.lineno, first.column, expected)

    def _transition(self, view: LineView) -> None:
        state = self.state
        state.pending_delta_this_line = 0
        state.pending_delta_next_line = 0
        state.expected_this_line = state.expected_next_line
        state.line_frame = IndentFrame(view.last_lineno + 1)
        state.line_start_frame = state.open_frames[-1] if state.open_frames else None
        state.line_started_nested = state.in_group() or state.in_string()

        group = state.innermost_group()
        if group is not None and group.kind in _ALIGNABLE_KINDS:
            state.align_column = group.align_column
        else:
            state.align_column = None

    def _record(self, measurement: Measurement | None) -> None:
        if measurement is not None:
            self.measurements.append(measurement)

    # =========================================================================
    # Invariant guards
    # =========================================================================

    def _pop(self, stack: list[Any], token: Token) -> Any:
        """Pop ``stack``, treating an empty stack as an invariant violation."""
        if stack:
            return stack.pop()
        self._violation(f"{token.text!r} at {token.line}:{token.column} closes nothing")
        return None

    def _violation(self, message: str) -> None:
        if self.strict:
            raise StateInvariantViolation(message)
        logger.warning("Ignoring unbalanced input: %s", message)


_HANDLED_EVENTS = (
    "on_keyword",
    "on_left_paren",
    "on_right_paren",
    "on_left_bracket",
    "on_right_bracket",
    "on_left_brace",
    "on_right_brace",
    "on_embedded_expr_begin",
    "on_embedded_expr_end",
    "on_string_begin",
    "on_string_end",
    "on_newline",
    "on_ignored_newline",
)
