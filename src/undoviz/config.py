"""Undoviz configuration.

UndovizConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field

from undoviz._errors import ConfigError


@dataclass(frozen=True, slots=True)
class GraphSymbols:
    """Glyphs used when drawing the history graph.

    Attributes:
        current: Glyph for the state the host is currently at.
        node: Glyph for an ordinary historical state.
        saved: Glyph for a state that was written to disk.
        vertical: Glyph for lane lines and connectors.

    """

    current: str = "@"
    node: str = "o"
    saved: str = "w"
    vertical: str = "|"

    def __post_init__(self) -> None:
        for name in ("current", "node", "saved", "vertical"):
            value = getattr(self, name)
            if not isinstance(value, str) or len(value) != 1:
                msg = f"symbol {name!r} must be a single character, got {value!r}"
                raise ConfigError(msg)

        glyphs = (self.current, self.node, self.saved, self.vertical)
        if len(set(glyphs)) != len(glyphs):
            msg = f"graph symbols must be distinct, got {glyphs!r}"
            raise ConfigError(msg)


@dataclass(frozen=True, slots=True)
class UndovizConfig:
    """Configuration for an undoviz session.

    Attributes:
        context_lines: Unchanged lines shown around each diff hunk.
        mirror_graph: Draw the graph right-to-left.
        inline_diff: Annotate each graph node with its change count.
        auto_preview: Schedule a preview whenever the selection moves.
        preview_delay_ms: Quiescence delay before a scheduled preview runs.
        header: Show the header block above the graph.
        help: Expand the header with the key reference.
        verbose: Print per-render timing summaries to stderr.
        max_events: Capacity of the observability event log.
        symbols: Graph glyphs.

    """

    context_lines: int = 3
    mirror_graph: bool = False
    inline_diff: bool = False
    auto_preview: bool = True
    preview_delay_ms: int = 250
    header: bool = True
    help: bool = False
    verbose: bool = False
    max_events: int = 10_000
    symbols: GraphSymbols = field(default_factory=GraphSymbols)

    def __post_init__(self) -> None:
        if self.context_lines < 0:
            msg = f"context_lines must be >= 0, got {self.context_lines}"
            raise ConfigError(msg)
        if self.preview_delay_ms < 0:
            msg = f"preview_delay_ms must be >= 0, got {self.preview_delay_ms}"
            raise ConfigError(msg)
        if self.max_events <= 0:
            msg = f"max_events must be positive, got {self.max_events}"
            raise ConfigError(msg)
        # Accept a plain mapping from config files
        if isinstance(self.symbols, dict):
            try:
                symbols = GraphSymbols(**self.symbols)
            except TypeError as exc:
                msg = f"invalid symbols table: {exc}"
                raise ConfigError(msg) from exc
            object.__setattr__(self, "symbols", symbols)

    @property
    def preview_delay(self) -> float:
        """Preview debounce delay in seconds."""
        return self.preview_delay_ms / 1000
