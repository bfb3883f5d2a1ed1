"""Mutable bookkeeping for the indentation state machine.

Everything the machine knows about one file lives in a single
IndentationState instance, threaded through every handler. Nothing here is
shared between files.

Indentation frames:
    Each physical line that leaves at least one construct open (a block
    keyword, a bracket group, an operator/comma/period continuation)
    pushes one IndentFrame and adds exactly one indent unit, however many
    constructs it opened. Each construct is an item of the frame of the
    line that opened it. When the frame's last item closes, the frame is
    released and its unit is taken back. Items opened and closed on the
    same line never reach the frame stack.

"""

from __future__ import annotations

from dataclasses import dataclass, field

from tailor.tokens import TokenKind


@dataclass(slots=True, eq=False)
class IndentFrame:
    """Indent unit contributed by one line.

    Attributes:
        start_line: Line that opened the frame
        open_count: Items of the frame still open

    """

    start_line: int
    open_count: int = 0


@dataclass(slots=True)
class Group:
    """An open paren, bracket or brace.

    Attributes:
        kind: Opening token kind (LPAREN, LBRACKET or LBRACE)
        start_line: Line of the opener
        column: Column of the opener
        frame: Frame the group is an item of
        align_column: Column continuation lines align to under argument
            alignment; None when nothing follows the opener on its line
        order: Opening sequence number, to find the innermost group across
            the per-kind stacks

    """

    kind: TokenKind
    start_line: int
    column: int
    frame: IndentFrame
    align_column: int | None
    order: int


@dataclass(slots=True)
class Opener:
    """A block keyword awaiting its ``end``."""

    keyword: str
    start_line: int
    frame: IndentFrame
    column: int = 0


@dataclass(slots=True)
class IndentationState:
    """Per-file indentation bookkeeping.

    Expected columns are absolute; pending deltas are in indent units and
    are reset at every line transition.

    ``indent_keyword_line`` records the line of the latest block or
    continuation keyword for inspection and debugging only; frames decide
    whether a block opened and closed on one line.

    """

    expected_this_line: int = 0
    expected_next_line: int = 0
    pending_delta_this_line: int = 0
    pending_delta_next_line: int = 0

    # Nesting stacks
    paren_lines: list[Group] = field(default_factory=list)
    bracket_lines: list[Group] = field(default_factory=list)
    brace_lines: list[Group] = field(default_factory=list)
    keyword_lines: list[Opener] = field(default_factory=list)
    string_nesting: list[int] = field(default_factory=list)
    embexpr_brace_depths: list[int] = field(default_factory=list)

    # Continuation trackers
    last_comma_continuation_line: int | None = None
    last_period_continuation_line: int | None = None
    op_continuation_start_line: list[int] = field(default_factory=list)
    indent_keyword_line: int | None = None
    in_keyword_plus_op: bool = False
    in_keyword_plus_comma: bool = False
    in_keyword_plus_period: bool = False

    # Frames holding the op/comma continuation items; None when inactive or
    # absorbed by a keyword opened on the same line
    op_frame: IndentFrame | None = None
    comma_frame: IndentFrame | None = None
    # Frame of the active method chain, absorbed or not
    period_frame: IndentFrame | None = None
    period_chain_open: bool = False
    period_trailing: bool = False

    actual_indentation: int = 0
    running: bool = True

    # Frames
    open_frames: list[IndentFrame] = field(default_factory=list)
    line_frame: IndentFrame = field(default_factory=lambda: IndentFrame(1))

    # Snapshot taken at each line start
    line_start_frame: IndentFrame | None = None
    line_started_nested: bool = False
    align_column: int | None = None

    group_counter: int = 0

    def stack_for(self, kind: TokenKind) -> list[Group]:
        """The nesting stack for an opening or closing group token kind."""
        if kind in (TokenKind.LPAREN, TokenKind.RPAREN):
            return self.paren_lines
        if kind in (TokenKind.LBRACKET, TokenKind.RBRACKET):
            return self.bracket_lines
        return self.brace_lines

    def innermost_group(self) -> Group | None:
        """The most recently opened group still open, of any kind."""
        tops = [stack[-1] for stack in (self.paren_lines, self.bracket_lines, self.brace_lines) if stack]
        if not tops:
            return None
        return max(tops, key=lambda group: group.order)

    def in_group(self) -> bool:
        return bool(self.paren_lines or self.bracket_lines or self.brace_lines)

    def in_string(self) -> bool:
        return bool(self.string_nesting)
