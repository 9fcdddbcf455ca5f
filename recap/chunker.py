"""
Transcript chunking for size-limited language model requests.

A long conversation rarely fits into a single model request.  The
:class:`ChunkPartitioner` packs whole transcript lines into chunks that stay
within a budget and appends a continuation marker to every chunk except the
last, so the model knows to wait for more input before answering.

Two cost models are provided:

* :class:`CharacterCost` counts characters, separators included.
* :class:`TokenEstimate` approximates tokens as ``words * weight + overhead``
  per line, a deliberately generous estimate of real tokenizer output.

A line is never split.  A line that alone exceeds the budget is placed in a
chunk of its own and overshoots the budget.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

from .models import Turn

DEFAULT_CONTINUATION_MARKER = "\nNEXT CHUNK AFTER RESPONSE"
DEFAULT_SEPARATOR = "\n"


class CharacterCost:
    """Budget measured in characters."""

    def line_cost(self, line: str) -> float:
        return float(len(line))

    def separator_cost(self, separator: str) -> float:
        return float(len(separator))


class TokenEstimate:
    """Budget measured in estimated tokens.

    Args:
        weight: Tokens charged per whitespace separated word.
        overhead: Fixed tokens charged per line; covers the speaker label
            framing and the line break.
    """

    def __init__(self, weight: float = 1.5, overhead: float = 4.0) -> None:
        if weight <= 0:
            raise ValueError(f"token weight must be positive, got {weight}")
        if overhead < 0:
            raise ValueError(f"token overhead must not be negative, got {overhead}")
        self.weight = weight
        self.overhead = overhead

    def line_cost(self, line: str) -> float:
        return len(line.split()) * self.weight + self.overhead

    def separator_cost(self, separator: str) -> float:
        return 0.0


class ChunkPartitioner:
    """Split transcript lines into budget-sized chunks.

    Args:
        budget: Maximum cost of a chunk body, in the unit of ``cost_model``.
        cost_model: :class:`CharacterCost` (default) or :class:`TokenEstimate`.
        continuation_marker: Appended to every chunk but the last.
        separator: Joins lines inside a chunk.

    Raises:
        ValueError: If ``budget`` is not positive.
    """

    def __init__(
        self,
        budget: float,
        cost_model=None,
        continuation_marker: str = DEFAULT_CONTINUATION_MARKER,
        separator: str = DEFAULT_SEPARATOR,
    ) -> None:
        if budget <= 0:
            raise ValueError(f"chunk budget must be positive, got {budget}")
        self.budget = budget
        self.cost_model = cost_model if cost_model is not None else CharacterCost()
        self.continuation_marker = continuation_marker
        self.separator = separator

    def estimate(self, lines: Sequence[str]) -> float:
        """Cost of a chunk body holding ``lines``, each line costed whole."""
        if not lines:
            return 0.0
        costs = sum(self.cost_model.line_cost(line) for line in lines)
        return costs + (len(lines) - 1) * self.cost_model.separator_cost(self.separator)

    def group_lines(self, lines: Iterable[str]) -> List[List[str]]:
        """Pack ``lines`` into groups whose :meth:`estimate` fits the budget.

        A group only exceeds the budget when it holds a single line.
        """
        groups: List[List[str]] = []
        buffer: List[str] = []
        total = 0.0
        separator_cost = self.cost_model.separator_cost(self.separator)
        for line in lines:
            cost = self.cost_model.line_cost(line)
            if buffer and total + separator_cost + cost > self.budget:
                groups.append(buffer)
                buffer, total = [], 0.0
            if buffer:
                total += separator_cost
            buffer.append(line)
            total += cost
        if buffer:
            groups.append(buffer)
        return groups

    def partition(self, turns: Iterable[Turn]) -> List[str]:
        return self.partition_lines(str(turn) for turn in turns)

    def partition_lines(self, lines: Iterable[str]) -> List[str]:
        """Pack ``lines`` into chunks, preserving their order.

        Returns:
            The chunks, or an empty list when there are no lines.
        """
        groups = self.group_lines(lines)
        chunks = [self.separator.join(group) + self.continuation_marker for group in groups[:-1]]
        if groups:
            chunks.append(self.separator.join(groups[-1]))
        return chunks


def join_chunks(
    chunks: Sequence[str],
    continuation_marker: str = DEFAULT_CONTINUATION_MARKER,
    separator: str = DEFAULT_SEPARATOR,
) -> str:
    """Undo :meth:`ChunkPartitioner.partition_lines`.

    Strips the continuation marker from every chunk but the last and joins
    the bodies with ``separator``.
    """
    bodies = []
    for index, chunk in enumerate(chunks):
        if index < len(chunks) - 1 and continuation_marker and chunk.endswith(continuation_marker):
            chunk = chunk[: -len(continuation_marker)]
        bodies.append(chunk)
    return separator.join(bodies)
