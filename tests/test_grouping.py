import pytest

from wallet_swap_scanner.grouping import gas_fee, group_swaps, parse_amount, parse_decimals
from wallet_swap_scanner.tokens import TokenClassifier
from wallet_swap_scanner.types import TransferRecord

ME = "0xAbCdEf0000000000000000000000000000000001"
POOL = "0x9999999999999999999999999999999999999999"


def _tx(
    tx_hash: str,
    sender: str,
    recipient: str,
    value: str,
    symbol: str | None = None,
    decimals: str | None = "18",
    ts: str = "1760000000",
) -> TransferRecord:
    return TransferRecord(
        tx_hash=tx_hash,
        from_address=sender,
        to_address=recipient,
        value=value,
        timestamp=ts,
        gas_used="100000",
        gas_price="3000000000",
        token_symbol=symbol,
        token_decimal=decimals if symbol else None,
    )


def _units(amount: int, decimals: int = 18) -> str:
    return str(amount * 10**decimals)


def test_stable_out_token_in_is_a_buy() -> None:
    records = [
        _tx("0x1", ME, POOL, _units(100), "USDT"),
        _tx("0x1", POOL, ME, _units(50), "TOKEN"),
    ]

    swaps = group_swaps(records, ME, TokenClassifier())

    assert len(swaps) == 1
    swap = swaps[0]
    assert swap.side == "buy"
    assert swap.pair == "TOKEN/USDT"
    assert swap.from_token == "USDT"
    assert swap.from_amount == 100.0
    assert swap.to_token == "TOKEN"
    assert swap.to_amount == 50.0
    assert swap.gas_fee == pytest.approx(0.0003)


def test_token_out_stable_in_is_a_sell() -> None:
    records = [
        _tx("0x2", ME, POOL, _units(50), "TOKEN"),
        _tx("0x2", POOL, ME, _units(99), "USDC"),
    ]

    swaps = group_swaps(records, ME, TokenClassifier())

    assert [s.side for s in swaps] == ["sell"]
    assert swaps[0].pair == "TOKEN/USDC"


def test_address_comparison_ignores_case() -> None:
    records = [
        _tx("0x3", ME.lower(), POOL, _units(10), "USDT"),
        _tx("0x3", POOL, ME.upper().replace("0X", "0x"), _units(1), "CAKE"),
    ]

    assert len(group_swaps(records, ME, TokenClassifier())) == 1


def test_one_sided_transaction_emits_nothing() -> None:
    records = [
        _tx("0x4", ME, POOL, _units(10), "USDT"),
        _tx("0x4", ME, POOL, _units(5), "CAKE"),
    ]

    assert group_swaps(records, ME, TokenClassifier()) == []


def test_reference_for_reference_is_rejected() -> None:
    records = [
        _tx("0x5", ME, POOL, _units(10), "USDT"),
        _tx("0x5", POOL, ME, _units(10), "USDC"),
    ]

    assert group_swaps(records, ME, TokenClassifier()) == []


def test_native_for_stable_is_rejected() -> None:
    records = [
        _tx("0x6", ME, POOL, _units(1), None),
        _tx("0x6", POOL, ME, _units(600), "BSC-USD"),
    ]

    assert group_swaps(records, ME, TokenClassifier()) == []


def test_native_leg_is_synthesized_for_symbol_less_transfer() -> None:
    records = [
        _tx("0x7", ME, POOL, str(5 * 10**17), None),
        _tx("0x7", POOL, ME, _units(1000), "KOGE"),
    ]

    swaps = group_swaps(records, ME, TokenClassifier())

    assert len(swaps) == 1
    assert swaps[0].side == "buy"
    assert swaps[0].from_token == "BNB"
    assert swaps[0].from_amount == 0.5
    assert swaps[0].pair == "KOGE/BNB"


def test_token_for_native_is_a_sell() -> None:
    records = [
        _tx("0x8", ME, POOL, _units(1000), "KOGE"),
        _tx("0x8", POOL, ME, _units(2), None),
    ]

    swaps = group_swaps(records, ME, TokenClassifier())

    assert swaps[0].side == "sell"
    assert swaps[0].pair == "KOGE/BNB"


def test_zero_value_native_record_is_not_a_leg() -> None:
    records = [
        _tx("0x9", ME, POOL, "0", None),
        _tx("0x9", POOL, ME, _units(3), "CAKE"),
    ]

    assert group_swaps(records, ME, TokenClassifier()) == []


def test_token_for_token_defaults_to_sell() -> None:
    records = [
        _tx("0xa", ME, POOL, _units(3), "cake"),
        _tx("0xa", POOL, ME, _units(7), "TOKEN"),
    ]

    swaps = group_swaps(records, ME, TokenClassifier())

    assert swaps[0].side == "sell"
    assert swaps[0].pair == "CAKE/TOKEN"


def test_alias_is_normalized_on_emitted_swap() -> None:
    records = [
        _tx("0xb", ME, POOL, _units(25), "BSC-USD"),
        _tx("0xb", POOL, ME, _units(4), "ZKJ"),
    ]

    swaps = group_swaps(records, ME, TokenClassifier())

    assert swaps[0].from_token == "USDT"
    assert swaps[0].pair == "ZKJ/USDT"


def test_first_outgoing_and_first_incoming_legs_are_used() -> None:
    records = [
        _tx("0xc", ME, POOL, _units(10), "USDT"),
        _tx("0xc", ME, POOL, _units(20), "USDC"),
        _tx("0xc", POOL, ME, _units(1), "AAA"),
        _tx("0xc", POOL, ME, _units(2), "BBB"),
    ]

    swap = group_swaps(records, ME, TokenClassifier())[0]

    assert (swap.from_token, swap.from_amount) == ("USDT", 10.0)
    assert (swap.to_token, swap.to_amount) == ("AAA", 1.0)


def test_swaps_are_sorted_newest_first() -> None:
    records = [
        _tx("0xold", ME, POOL, _units(1), "USDT", ts="100"),
        _tx("0xold", POOL, ME, _units(1), "AAA", ts="100"),
        _tx("0xnew", ME, POOL, _units(1), "USDT", ts="300"),
        _tx("0xnew", POOL, ME, _units(1), "BBB", ts="300"),
        _tx("0xmid", ME, POOL, _units(1), "USDT", ts="200"),
        _tx("0xmid", POOL, ME, _units(1), "CCC", ts="200"),
    ]

    swaps = group_swaps(records, ME, TokenClassifier())

    assert [s.tx_hash for s in swaps] == ["0xnew", "0xmid", "0xold"]
    assert [s.timestamp for s in swaps] == [300, 200, 100]


def test_token_decimals_are_respected() -> None:
    records = [
        _tx("0xd", ME, POOL, "250000000", "USDC", decimals="6"),
        _tx("0xd", POOL, ME, _units(1), "AAA"),
    ]

    assert group_swaps(records, ME, TokenClassifier())[0].from_amount == 250.0


def test_malformed_numbers_do_not_raise() -> None:
    records = [
        _tx("0xe", ME, POOL, "not-a-number", "USDT", decimals="??", ts="garbage"),
        _tx("0xe", POOL, ME, _units(1), "AAA"),
    ]

    swaps = group_swaps(records, ME, TokenClassifier())

    assert swaps[0].from_amount == 0.0
    assert swaps[0].timestamp == 0


def test_parse_helpers() -> None:
    assert parse_decimals(None) == 18
    assert parse_decimals("") == 18
    assert parse_decimals("abc") == 18
    assert parse_decimals("6") == 6
    assert parse_decimals("0") == 0
    assert parse_amount("1500000", 6) == 1.5
    assert parse_amount("1e18") == 1.0
    assert parse_amount("nan") == 0.0
    assert parse_amount(None) == 0.0
    assert gas_fee("21000", "1000000000") == pytest.approx(0.000021)
    assert gas_fee("x", "1000000000") == 0.0


def test_oversized_numbers_parse_to_zero() -> None:
    assert parse_amount("9" * 400) == 0.0
    assert parse_amount("1.5", 400) == 0.0
    assert parse_decimals("400") == 18
    assert parse_decimals("100000000") == 18
    assert parse_decimals("77") == 77
    assert gas_fee("9" * 200, "9" * 200) == 0.0


def test_oversized_leg_amount_still_emits_swap() -> None:
    records = [
        _tx("0xf", ME, POOL, "9" * 400, "USDT", decimals="100000000"),
        _tx("0xf", POOL, ME, _units(1), "AAA"),
    ]

    swaps = group_swaps(records, ME, TokenClassifier())

    assert len(swaps) == 1
    assert swaps[0].from_amount == 0.0
    assert swaps[0].to_amount == 1.0


def test_blank_symbol_is_a_native_leg() -> None:
    records = [
        _tx("0x10", ME, POOL, str(2 * 10**17), "   "),
        _tx("0x10", POOL, ME, _units(5), "AAA"),
    ]

    swaps = group_swaps(records, ME, TokenClassifier())

    assert swaps[0].from_token == "BNB"
    assert swaps[0].from_amount == 0.2
    assert swaps[0].pair == "AAA/BNB"
