"""Tests for dominant expression selection."""


class TestAttributeAggregator:
    """Test cases for AttributeAggregator."""

    def test_highest_probability_wins(self):
        from face_attendance.recognition import AttributeAggregator

        aggregator = AttributeAggregator(["happy", "neutral", "sad"])
        assert aggregator.dominant({"happy": 0.2, "neutral": 0.5, "sad": 0.3}) == "neutral"

    def test_tie_goes_to_vocabulary_order(self):
        from face_attendance.recognition import AttributeAggregator

        aggregator = AttributeAggregator(["happy", "sad"])
        assert aggregator.dominant({"happy": 0.5, "sad": 0.5}) == "happy"
        # Mapping order does not matter, vocabulary order does
        assert aggregator.dominant({"sad": 0.5, "happy": 0.5}) == "happy"

    def test_empty_distribution(self):
        from face_attendance.recognition import AttributeAggregator

        assert AttributeAggregator().dominant({}) is None

    def test_all_zero_returns_first(self):
        from face_attendance.recognition import AttributeAggregator

        aggregator = AttributeAggregator(["neutral", "happy"])
        assert aggregator.dominant({"happy": 0.0, "neutral": 0.0}) == "neutral"

    def test_default_vocabulary(self):
        from face_attendance.recognition import AttributeAggregator

        aggregator = AttributeAggregator()
        distribution = {
            "surprised": 0.05, "angry": 0.05, "happy": 0.8, "neutral": 0.1,
        }
        assert aggregator.dominant(distribution) == "happy"
        assert aggregator.vocabulary[0] == "neutral"

    def test_keys_outside_vocabulary_come_last(self):
        from face_attendance.recognition import AttributeAggregator

        aggregator = AttributeAggregator(["happy"])
        ordered = list(aggregator.ordered({"contempt": 0.4, "happy": 0.4}))

        assert ordered == [("happy", 0.4), ("contempt", 0.4)]
        assert aggregator.dominant({"contempt": 0.4, "happy": 0.4}) == "happy"
        assert aggregator.dominant({"contempt": 0.6, "happy": 0.4}) == "contempt"
