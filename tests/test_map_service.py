"""Tests for segment geometry resolution and map layer building."""

import math

import pytest

from itinerary_map.api.errors import GeometryUnavailableError
from itinerary_map.api.services.map_service import MapService


def _segment(**extra):
    segment = {"from": {"coords": [0, 0]}, "to": {"coords": [1, 1]}}
    segment.update(extra)
    return segment


class TestResolveSegment:
    """Tests for MapService.resolve_segment priority and fallback."""

    def test_raw_polyline_used_verbatim(self):
        raw = [[0, 0], [0.5, 0.7], [1, 1]]
        result = MapService.resolve_segment(_segment(polyline=raw))
        assert result.points == [(0.0, 0.0), (0.5, 0.7), (1.0, 1.0)]
        assert all(isinstance(p, tuple) for p in result.points)
        assert result.approximated is False

    def test_raw_polyline_wins_over_encoded(self):
        raw = [[10.0, 20.0]]
        result = MapService.resolve_segment(
            _segment(polyline=raw, encoded_polyline="_p~iF~ps|U")
        )
        assert result.points == [(10.0, 20.0)]
        assert result.approximated is False

    def test_encoded_polyline_decoded(self):
        result = MapService.resolve_segment(_segment(encoded_polyline="_p~iF~ps|U"))
        assert result.points == [(38.5, -120.2)]
        assert result.approximated is False

    def test_encoded_string_in_polyline_field(self):
        result = MapService.resolve_segment(_segment(polyline="_p~iF~ps|U"))
        assert result.points == [(38.5, -120.2)]
        assert result.approximated is False

    def test_no_geometry_falls_back_to_straight_line(self):
        result = MapService.resolve_segment(_segment())
        assert result.points == [(0, 0), (1, 1)]
        assert result.approximated is True

    def test_empty_decode_falls_back(self):
        result = MapService.resolve_segment(_segment(encoded_polyline="_"))
        assert result.points == [(0, 0), (1, 1)]
        assert result.approximated is True

    @pytest.mark.parametrize("raw", [[], [[1]], [["a", "b"]], [[True, False]], [[math.nan, 1.0]]])
    def test_invalid_raw_polyline_falls_back(self, raw):
        result = MapService.resolve_segment(_segment(polyline=raw))
        assert result.approximated is True

    @pytest.mark.parametrize(
        "segment",
        [
            {"from": {"coords": [0, 0]}},
            {"from": {"coords": [0, 0]}, "to": {}},
            {"from": {"coords": [0, 0]}, "to": {"coords": [1]}},
            {"from": {"coords": [math.inf, 0]}, "to": {"coords": [1, 1]}},
            {"from": None, "to": {"coords": [1, 1]}},
        ],
    )
    def test_missing_endpoint_refused(self, segment):
        with pytest.raises(GeometryUnavailableError, match="no renderable geometry"):
            MapService.resolve_segment(segment)

    def test_refusal_is_value_error(self):
        with pytest.raises(ValueError):
            MapService.resolve_segment({"polyline": [[0, 0], [1, 1]]})

    @pytest.mark.parametrize("bad_point", [[1], None, [1, 2, 3], ["x", 2]])
    def test_malformed_later_points_dropped(self, bad_point):
        raw = [[0, 0], bad_point, [1, 1]]
        result = MapService.resolve_segment(_segment(polyline=raw))
        assert result.points == [(0.0, 0.0), (1.0, 1.0)]
        assert result.approximated is False

    def test_to_dict(self):
        payload = MapService.resolve_segment(_segment()).to_dict()
        assert payload == {"points": [[0.0, 0.0], [1.0, 1.0]], "approximated": True}


class TestStopGeometry:
    """Tests for stop marker positions and transfer lines."""

    def test_coords_preferred(self):
        stop = {"coords": [1, 2], "from_coords": [3, 4], "to_coords": [5, 6]}
        assert MapService.stop_coordinates(stop) == (1.0, 2.0)

    def test_from_then_to_coords(self):
        assert MapService.stop_coordinates({"from_coords": [3, 4], "to_coords": [5, 6]}) == (3.0, 4.0)
        assert MapService.stop_coordinates({"coords": [None, 1], "to_coords": [5, 6]}) == (5.0, 6.0)

    def test_no_coords(self):
        assert MapService.stop_coordinates({"name": "nowhere"}) is None

    def test_transfer_line(self):
        stop = {"type": "train", "from_coords": [1, 1], "to_coords": [2, 2]}
        line = MapService.transfer_line(stop)
        assert line.points == [(1.0, 1.0), (2.0, 2.0)]
        assert line.approximated is True

    def test_transfer_line_uses_coords_as_start(self):
        line = MapService.transfer_line({"type": "transfer", "coords": [1, 1], "to_coords": [2, 2]})
        assert line.points[0] == (1.0, 1.0)

    def test_transfer_line_requires_type_and_destination(self):
        assert MapService.transfer_line({"type": "hotel", "coords": [1, 1], "to_coords": [2, 2]}) is None
        assert MapService.transfer_line({"type": "travel_day", "from_coords": [1, 1]}) is None


class TestSegmentStyle:
    """Tests for mode colours and dashing."""

    @pytest.mark.parametrize(
        "mode,color",
        [
            ("drive", "#1e40af"),
            ("Rail", "#10b981"),
            ("hike", "#f97316"),
            ("walk", "#f97316"),
            ("ferry", "#6b7280"),
            (None, "#1e40af"),
        ],
    )
    def test_mode_colors(self, mode, color):
        assert MapService.segment_style(mode, False)["color"] == color

    def test_approximated_is_dashed(self):
        assert MapService.segment_style("drive", True)["dash_array"] == "8,8"
        assert "dash_array" not in MapService.segment_style("drive", False)


class TestBuildMapLayers:
    """Tests for MapService.build_map_layers."""

    def test_sample_itinerary(self, itinerary):
        layers = MapService.build_map_layers(itinerary)

        # apt, drive (from_coords), museum, hotel, apt2
        assert len(layers["markers"]) == 5
        assert len(layers["routes"]) == 1
        assert len(layers["transfer_lines"]) == 1
        assert layers["skipped"] == []

        route = layers["routes"][0]
        assert route["approximated"] is True
        assert route["style"]["dash_array"] == "8,8"
        assert route["popup"][0] == "I-5 North"
        assert "polyline missing" in route["popup"][-1]

    def test_bad_items_are_skipped_not_fatal(self):
        itinerary = {
            "days": [
                {
                    "stops": [{"name": "lost"}, {"name": "found", "coords": [10, 20]}],
                    "segments": [
                        {"from": {"coords": [0, 0]}},
                        {"from": {"coords": [0, 0]}, "to": {"coords": [1, 1]}, "mode": "rail",
                         "polyline": [[0, 0], [0.5, 0.5], [1, 1]], "distance_text": "5 km"},
                    ],
                },
                "not a day",
            ]
        }
        layers = MapService.build_map_layers(itinerary)

        assert [m["name"] for m in layers["markers"]] == ["found"]
        assert len(layers["routes"]) == 1
        assert layers["routes"][0]["approximated"] is False
        assert "Distance: 5 km" in layers["routes"][0]["popup"]
        assert {"kind": "stop", "day": 1, "ref": "lost"} in layers["skipped"]
        assert {"kind": "segment", "day": 1, "ref": 0} in layers["skipped"]

    def test_malformed_polyline_does_not_abort_layers(self):
        itinerary = {
            "days": [
                {
                    "stops": [{"name": "kept", "coords": [5, 5]}],
                    "segments": [
                        {"from": {"coords": [0, 0]}, "to": {"coords": [1, 1]},
                         "polyline": [[0, 0], [1]]},
                        {"from": {"coords": [2, 2]}, "to": {"coords": [3, 3]}},
                    ],
                }
            ]
        }
        layers = MapService.build_map_layers(itinerary)

        assert [m["name"] for m in layers["markers"]] == ["kept"]
        assert len(layers["routes"]) == 2
        assert layers["routes"][0]["points"] == [[0.0, 0.0]]
        assert layers["routes"][1]["approximated"] is True
        assert layers["bounds"] == {"north": 5.0, "south": 0.0, "east": 5.0, "west": 0.0}

    def test_points_key_is_accepted(self):
        layers = MapService.build_map_layers(
            {"days": [{"points": [{"name": "p", "coords": [1, 2], "parking": "Lot B"}]}]}
        )
        assert layers["markers"][0]["parking"] == "Lot B"

    def test_bounds(self):
        bounds = MapService.calculate_bounds([(1.0, 2.0), (-3.0, 5.0)])
        assert bounds == {"north": 1.0, "south": -3.0, "east": 5.0, "west": 2.0}

    def test_bounds_empty(self):
        assert MapService.calculate_bounds([]) == {}
        assert MapService.build_map_layers({"days": []})["bounds"] == {}
