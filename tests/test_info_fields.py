"""Tests for typed INFO field accessors."""

import pytest

from genobase_importer.exceptions import FieldMissingError, FieldTypeError
from genobase_importer.info_fields import (
    get_first_float,
    get_flag,
    get_float,
    get_string,
)


class TestGetFlag:
    def test_present_flag(self):
        assert get_flag({"COMMON": True}, "COMMON") is True

    def test_absent_flag_is_false(self):
        assert get_flag({}, "COMMON") is False

    @pytest.mark.parametrize("value,expected", [(1, True), (0, False)])
    def test_integer_encoded_flag(self, value, expected):
        assert get_flag({"COMMON": value}, "COMMON") is expected

    def test_other_value_is_type_error(self):
        with pytest.raises(FieldTypeError) as exc_info:
            get_flag({"COMMON": "yes"}, "COMMON")
        assert exc_info.value.key == "COMMON"


class TestGetString:
    def test_string(self):
        assert get_string({"VC": "SNV"}, "VC") == "SNV"

    def test_missing(self):
        with pytest.raises(FieldMissingError) as exc_info:
            get_string({}, "VC")
        assert exc_info.value.key == "VC"

    def test_wrong_type(self):
        with pytest.raises(FieldTypeError):
            get_string({"VC": 1.5}, "VC")


class TestGetFloat:
    def test_float(self):
        assert get_float({"AF_het": 0.25}, "AF_het") == 0.25

    def test_integer_promoted(self):
        assert get_float({"AF_het": 0}, "AF_het") == 0.0

    def test_tuple_is_type_error(self):
        with pytest.raises(FieldTypeError):
            get_float({"AF_het": (0.1, 0.2)}, "AF_het")

    def test_missing(self):
        with pytest.raises(FieldMissingError):
            get_float({}, "AF_het")


class TestGetFirstFloat:
    def test_scalar_is_single_element_array(self):
        assert get_first_float({"AF": 0.002}, "AF") == pytest.approx(0.002)

    def test_first_element_of_tuple(self):
        assert get_first_float({"AF": (0.1, 0.3)}, "AF") == pytest.approx(0.1)

    def test_first_element_of_list(self):
        assert get_first_float({"AF": [0.4]}, "AF") == pytest.approx(0.4)

    def test_empty_array_is_missing(self):
        with pytest.raises(FieldMissingError):
            get_first_float({"AF": ()}, "AF")

    def test_string_is_type_error(self):
        with pytest.raises(FieldTypeError) as exc_info:
            get_first_float({"AF": "0.1"}, "AF")
        assert exc_info.value.expected == "float array"

    def test_missing_and_type_errors_are_distinguishable(self):
        assert not issubclass(FieldMissingError, FieldTypeError)
        assert not issubclass(FieldTypeError, FieldMissingError)
