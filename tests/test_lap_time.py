import pytest

from trackmate.errors import InvalidInputError, LapTimeValidationError
from trackmate.timing import check_plausible, compose_lap_time, format_lap_time, parse_lap_time


class TestFormatLapTime:

    def test_minutes_seconds_millis(self):
        assert format_lap_time(114320) == '1:54.320'

    def test_minutes_are_not_padded(self):
        assert format_lap_time(3723001) == '62:03.001'

    def test_zero(self):
        assert format_lap_time(0) == '0:00.000'

    def test_sub_second_padding(self):
        assert format_lap_time(5007) == '0:05.007'

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            format_lap_time(-1)


class TestParseLapTime:

    @pytest.mark.parametrize('text,expected', [
        ('1:54.320', 114320),
        ('1:54:320', 114320),
        ('54.3', 54300),
        ('54:300', 54300),
        ('0:05.5', 5500),
        ('62:03.001', 3723001),
        ('120.25', 120250),
        (' 1:54.320 ', 114320),
        ('1:54', 1540),
    ])
    def test_accepted_formats(self, text, expected):
        assert parse_lap_time(text) == expected

    @pytest.mark.parametrize('text', ['abc', '', '1:5x', '1:75.000', '1:54.3200', '1234.5', '-1:00.000', None])
    def test_rejected_formats(self, text):
        assert parse_lap_time(text) is None

    @pytest.mark.parametrize('ms', [0, 999, 20000, 114320, 899999, 3723001, 59999999])
    def test_parse_reads_back_formatted_time(self, ms):
        assert parse_lap_time(format_lap_time(ms)) == ms


class TestPlausibility:

    def test_compose(self):
        assert compose_lap_time(1, 54, 320) == 114320

    @pytest.mark.parametrize('ms', [20000, 114320, 900000])
    def test_accepted(self, ms):
        assert check_plausible(ms) == ms

    def test_too_low(self):
        with pytest.raises(LapTimeValidationError, match='unrealistically low'):
            check_plausible(19999)

    def test_too_high(self):
        with pytest.raises(LapTimeValidationError, match='unrealistically high'):
            check_plausible(900001)

    def test_is_an_input_error(self):
        assert issubclass(LapTimeValidationError, InvalidInputError)
