"""
Tests for result, wish and roadmap schemas.
"""

import pytest
from pydantic import ValidationError

from appgram.core.errors import ErrorCode
from appgram.schemas.comment import CommentCreate
from appgram.schemas.result import Err, Ok, err, ok
from appgram.schemas.roadmap import RoadmapData
from appgram.schemas.wish import Wish, WishFilters, WishStatus


@pytest.mark.unit
class TestApiResult:
    """Tests for the Ok/Err union."""

    def test_ok(self):
        result = ok({"id": "1"})
        assert isinstance(result, Ok)
        assert result.ok is True
        assert result.value == {"id": "1"}

    def test_err_with_enum_code(self):
        """Test that enum codes are stored as their string value."""
        result = err(ErrorCode.NETWORK_ERROR, "Connection refused")
        assert isinstance(result, Err)
        assert result.ok is False
        assert result.error_code == "NETWORK_ERROR"
        assert result.error_message == "Connection refused"
        assert result.error.status_code is None

    def test_err_with_status(self):
        result = err("HTTP_404", "Not found", status_code=404)
        assert result.error.status_code == 404

    def test_map(self):
        assert ok(2).map(lambda v: v * 10).value == 20
        failed = err("X", "nope")
        assert failed.map(lambda v: v * 10) is failed


@pytest.mark.unit
class TestWishSchemas:
    """Tests for wish models."""

    def test_wish_defaults(self):
        wish = Wish.model_validate({"id": "w1", "title": "Dark mode", "extra_field": 1})
        assert wish.vote_count == 0
        assert wish.has_voted is False
        assert wish.status == WishStatus.PENDING

    def test_negative_vote_count_rejected(self):
        with pytest.raises(ValidationError):
            Wish(id="w1", title="x", vote_count=-1)

    def test_filters_to_params_joins_lists(self):
        """Test that multi-value status filters are comma-joined."""
        filters = WishFilters(
            status=[WishStatus.PLANNED, WishStatus.IN_PROGRESS],
            search="dark",
            sort_by="votes",
            page=2,
            fingerprint="abc",
        )
        assert filters.to_params() == {
            "status": "planned,in_progress",
            "search": "dark",
            "sort_by": "votes",
            "page": 2,
            "fingerprint": "abc",
        }

    def test_filters_reject_unknown_keys(self):
        with pytest.raises(ValidationError):
            WishFilters(colour="red")

    def test_comment_create_rejects_blank_content(self):
        with pytest.raises(ValidationError):
            CommentCreate(wish_id="w1", content="   ")

    def test_comment_create_rejects_bad_email(self):
        with pytest.raises(ValidationError):
            CommentCreate(wish_id="w1", content="Nice", author_email="not-an-email")


@pytest.mark.unit
class TestRoadmapData:
    """Tests for roadmap folding."""

    def test_columns_folded_from_roadmap(self):
        data = RoadmapData.model_validate(
            {
                "roadmap": {
                    "id": "r1",
                    "name": "Public",
                    "columns": [
                        {"id": "c1", "name": "Planned", "items": [{"id": "i1", "title": "A"}]},
                        {"id": "c2", "name": "Done", "items": [{"id": "i2", "title": "B"}, {"id": "i3", "title": "C"}]},
                    ],
                }
            }
        )
        assert [c.id for c in data.columns] == ["c1", "c2"]
        assert data.total_items == 3

    def test_explicit_total_kept(self):
        data = RoadmapData.model_validate({"columns": [], "total_items": 7})
        assert data.total_items == 7
