import pytest

from fvmem.header import HEADER_TAG, MAX_USE_COUNT, AllocHeader


def test_new_header_has_size_and_no_users():
    hdr = AllocHeader(128)
    assert hdr.size == 128
    assert hdr.use_count() == 0


def test_tag_is_fixed():
    assert AllocHeader(1).tag == b"allhead0" == HEADER_TAG


def test_inc_and_dec_round_trip():
    hdr = AllocHeader(10)
    hdr.inc_use_count()
    hdr.inc_use_count()
    assert hdr.use_count() == 2
    hdr.dec_use_count()
    assert hdr.use_count() == 1
    hdr.dec_use_count()
    assert hdr.use_count() == 0


def test_dec_at_zero_raises():
    hdr = AllocHeader(10)
    with pytest.raises(ValueError):
        hdr.dec_use_count()
    assert hdr.use_count() == 0


def test_inc_beyond_limit_raises():
    hdr = AllocHeader(10)
    for _ in range(MAX_USE_COUNT):
        hdr.inc_use_count()
    assert hdr.use_count() == MAX_USE_COUNT
    with pytest.raises(OverflowError):
        hdr.inc_use_count()
    assert hdr.use_count() == MAX_USE_COUNT


def test_reset_clears_use_count():
    hdr = AllocHeader(10)
    for _ in range(5):
        hdr.inc_use_count()
    hdr.reset_use_count()
    assert hdr.use_count() == 0


def test_size_can_change():
    hdr = AllocHeader(10)
    hdr.size = 500
    assert hdr.size == 500


def test_valid_header():
    assert AllocHeader(0).is_valid() is True


def test_corrupted_tag_is_invalid():
    hdr = AllocHeader(0)
    hdr.tag = b"xllhead0"
    assert hdr.is_valid() is False