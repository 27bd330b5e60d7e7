from __future__ import annotations

from datetime import datetime

import pytest

from statement_parser.document import StatementDocument
from statement_parser.errors import InvalidInput
from statement_parser.models import TabularConfig, TransactionKind
from statement_parser.tabular import GenericCsvExtractor


SAMPLE_CSV = """Date,Amount,Description
03/01/2024,-4.50,Starbucks Coffee #123
03/02/2024,"2,500.00",ACME Payroll
03/03/2024,-60.00,Shell Gas
31/31/2024,-1.00,Broken row
03/04/2024,-15.99,Netflix subscription
03/05/2024,(20.00),Amazon purchase
"""


def _csv(text: str, filename: str = "export.csv") -> StatementDocument:
    return StatementDocument(content=text.encode("utf-8"), filename=filename)


def test_malformed_middle_row_does_not_abort_batch():
    batch = GenericCsvExtractor().extract(_csv(SAMPLE_CSV))

    assert len(batch.transactions) == 5
    assert len(batch.skipped) == 1
    skip = batch.skipped[0]
    assert skip.row == 4
    assert "Invalid date" in skip.reason
    assert skip.raw["Description"] == "Broken row"


def test_rows_are_normalized():
    txs = GenericCsvExtractor().extract(_csv(SAMPLE_CSV)).transactions
    coffee, payroll, gas, netflix, amazon = txs

    assert coffee.date == datetime(2024, 3, 1)
    assert coffee.amount == pytest.approx(4.50)
    assert coffee.kind is TransactionKind.EXPENSE
    assert coffee.currency == "USD"
    assert coffee.category_guess == "Food & Dining"
    assert coffee.merchant_name == "Starbucks Coffee #123"
    assert coffee.raw_fields == {"Date": "03/01/2024", "Amount": "-4.50", "Description": "Starbucks Coffee #123"}

    assert payroll.amount == pytest.approx(2500.0)
    assert payroll.kind is TransactionKind.INCOME
    assert payroll.category_guess == "Salary"

    assert gas.category_guess == "Transport"
    assert netflix.category_guess == "Bills & Utilities"

    assert amazon.amount == pytest.approx(20.0)
    assert amazon.kind is TransactionKind.EXPENSE
    assert amazon.category_guess == "Shopping"

    assert len({t.fingerprint for t in txs}) == 5


def test_round_trip_through_own_serialization():
    extractor = GenericCsvExtractor()
    first = extractor.extract(_csv(SAMPLE_CSV)).transactions

    again = extractor.extract(_csv(extractor.to_csv(first))).transactions

    assert [t.fingerprint for t in again] == [t.fingerprint for t in first]
    assert again == first


def test_custom_columns_delimiter_and_date_hint():
    text = "Datum;Betrag;Verwendungszweck\n01.02.2024;-1.234,56;Miete Februar\n02.02.2024;12,5;Zinsen\n"
    extractor = GenericCsvExtractor(
        TabularConfig(
            date_column="Datum",
            amount_column="Betrag",
            description_column="Verwendungszweck",
            delimiter=";",
            date_format="%d.%m.%Y",
            currency="EUR",
        )
    )
    doc = _csv(text, "umsaetze.csv")

    assert extractor.supports(doc)
    rent, interest = extractor.extract(doc).transactions
    assert rent.date == datetime(2024, 2, 1)
    assert rent.amount == pytest.approx(1234.56)
    assert rent.kind is TransactionKind.EXPENSE
    assert rent.currency == "EUR"
    assert interest.amount == pytest.approx(12.5)
    assert interest.kind is TransactionKind.INCOME


def test_headerless_file_by_position():
    text = "2024-01-05,19.99,Spotify\n2024-01-06,-5,Parking\n"
    extractor = GenericCsvExtractor(
        TabularConfig(has_header=False, date_column=0, amount_column=1, description_column=2, invert_sign=True)
    )

    txs = extractor.extract(_csv(text)).transactions

    assert [t.description for t in txs] == ["Spotify", "Parking"]
    assert txs[0].kind is TransactionKind.EXPENSE
    assert txs[1].kind is TransactionKind.INCOME
    assert extractor.to_csv(txs) == text


def test_currency_column():
    text = "Date,Amount,Description,Currency\n2024-01-05,10.00,Book,eur\n2024-01-06,10.00,Pen,\n2024-01-07,1.00,Bad,EURO\n"
    extractor = GenericCsvExtractor(TabularConfig(currency_column="Currency"))

    batch = extractor.extract(_csv(text))

    assert [t.currency for t in batch.transactions] == ["EUR", "USD"]
    assert batch.skipped[0].reason.startswith("Invalid currency")


def test_overlong_line_becomes_skip():
    text = "Date,Amount,Description\n2024-01-05,1.00,A\n2024-01-06,2.00,B,extra\n2024-01-07,3.00,C\n"

    batch = GenericCsvExtractor().extract(_csv(text))

    assert [t.description for t in batch.transactions] == ["A", "C"]
    assert len(batch.skipped) == 1


def test_blank_description_falls_back():
    text = "Date,Amount,Description\n2024-01-05,1.00,\n"
    tx = GenericCsvExtractor().extract(_csv(text)).transactions[0]
    assert tx.description == "Unknown"


def test_supports_probe():
    extractor = GenericCsvExtractor()
    assert extractor.supports(_csv(SAMPLE_CSV))
    assert extractor.supports(StatementDocument(content=SAMPLE_CSV.encode(), filename="", content_type="text/csv"))
    # wrong file-type signal
    assert not extractor.supports(_csv(SAMPLE_CSV, "export.txt"))
    assert not extractor.supports(StatementDocument(content=b"%PDF-1.7 ...", filename="fake.csv"))
    # expected columns missing
    assert not extractor.supports(_csv("When,How much\n2024-01-01,1\n"))
    assert not extractor.supports(_csv(""))


def test_probe_reads_only_a_prefix():
    body = "".join(f"2024-01-{(i % 28) + 1:02d},{i}.00,Row {i}\n" for i in range(200))
    extractor = GenericCsvExtractor(TabularConfig(probe_bytes=64))
    assert extractor.supports(_csv("Date,Amount,Description\n" + body))


def test_binary_content_is_invalid_input():
    with pytest.raises(InvalidInput):
        GenericCsvExtractor().extract(StatementDocument(content=b"\x00\x01\x02", filename="x.csv"))
    with pytest.raises(InvalidInput):
        GenericCsvExtractor().extract(StatementDocument(content=b"%PDF-1.4\n...", filename="x.csv"))


def test_empty_file_gives_empty_batch():
    extractor = GenericCsvExtractor()
    batch = extractor.extract(_csv(""))
    assert batch.transactions == []
    result = extractor.validate(batch.transactions, batch.skipped)
    assert not result.is_valid
    assert result.errors[0].code == "empty_result"


def test_payload_is_flat_list_for_tabular():
    batch = GenericCsvExtractor().extract(_csv(SAMPLE_CSV))
    payload = batch.to_payload()
    assert isinstance(payload, list)
    assert payload[0]["date"] == "2024-03-01T00:00:00"
    assert payload[0]["type"] == "expense"
    assert payload[0]["categoryGuess"] == "Food & Dining"
