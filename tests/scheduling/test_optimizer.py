"""
Unit tests for QueueOptimizer.
"""

import pytest

from classboard.queue.optimizer import QueueOptimizer, pack
from classboard.validation.validators import ValidationReason


@pytest.fixture
def optimizer(settings):
    return QueueOptimizer(settings)


class TestOptimise:
    """Packing whole chains."""

    def test_packed_queue_is_untouched(self, optimizer, packed_queue):
        """Test an already packed queue comes back as the same object."""
        result = optimizer.optimise(packed_queue)

        assert result.is_applied
        assert result.is_optimised
        assert result.queue is packed_queue
        assert result.label == "3/3 Optimised"

    def test_loose_queue_is_packed_from_head(self, optimizer, loose_queue):
        """Test gaps collapse to the configured gap from the first start."""
        result = optimizer.optimise(loose_queue)

        assert result.is_applied
        assert not result.is_optimised
        assert [node.start_time for node in result.queue] == [600, 675, 750]
        assert result.changed_ids == ["e2", "e3"]
        assert result.adjusted == 2
        assert result.label == "1/3 Optimised"

    def test_anchor_time(self, optimizer, packed_queue):
        """Test an anchor moves the head too."""
        result = optimizer.optimise(packed_queue, anchor_time=540)

        assert [node.start_time for node in result.queue] == [540, 615, 690]
        assert result.label == "0/3 Optimised"

    def test_idempotent(self, optimizer, loose_queue):
        """Test optimising twice changes nothing the second time."""
        once = optimizer.optimise(loose_queue).queue
        twice = optimizer.optimise(once)

        assert twice.is_optimised
        assert twice.queue is once

    def test_overflow_rejects_whole_pack(self, optimizer, make_node, make_queue):
        """Test a pack pushing an event past midnight is refused atomically."""
        queue = make_queue([make_node("e1", "22:00"), make_node("e2", "23:00", 30)])

        result = optimizer.optimise(queue, anchor_time=1380)

        assert not result.is_applied
        assert result.reason == ValidationReason.OUT_OF_DAY_BOUNDS
        assert result.overflow_ids == ["e2"]
        assert result.queue is queue

    def test_empty_queue(self, optimizer, make_queue):
        """Test an empty queue is trivially optimised."""
        result = optimizer.optimise(make_queue([]))

        assert result.is_optimised
        assert result.label == "0/0 Optimised"

    def test_input_queue_not_mutated(self, optimizer, loose_queue):
        """Test the input queue keeps its start times."""
        optimizer.optimise(loose_queue)

        assert [node.start_time for node in loose_queue] == [600, 690, 840]


class TestOptimiseFrom:
    """Packing a tail of the chain."""

    def test_head_untouched(self, optimizer, loose_queue):
        """Test events before the index keep their times."""
        result = optimizer.optimise_from(loose_queue, 1, 700)

        assert [node.start_time for node in result.queue] == [600, 700, 775]
        assert result.changed_ids == ["e2", "e3"]

    def test_bad_index(self, optimizer, loose_queue):
        """Test an index outside the chain raises."""
        with pytest.raises(ValueError, match="outside queue"):
            optimizer.optimise_from(loose_queue, 3, 600)

    def test_negative_start(self, optimizer, loose_queue):
        """Test a negative start raises."""
        with pytest.raises(ValueError, match="negative"):
            optimizer.optimise_from(loose_queue, 0, -5)


class TestLockCheck:
    """Locked mode precondition."""

    def test_can_lock_packed(self, optimizer, packed_queue):
        """Test a packed queue can be locked."""
        assert optimizer.is_optimised(packed_queue)
        assert optimizer.can_lock(packed_queue)

    def test_cannot_lock_loose(self, optimizer, loose_queue):
        """Test a loose queue cannot be locked."""
        assert not optimizer.can_lock(loose_queue)


class TestPack:
    """The pack helper."""

    def test_pack_keeps_unmoved_nodes(self, make_node):
        """Test nodes already in place are returned as they are."""
        first = make_node("e1", "10:00")
        second = make_node("e2", "12:00", 30)

        packed = pack([first, second], 600, 0)

        assert packed[0] is first
        assert packed[1].start_time == 660
        assert packed[1].duration == 30


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
