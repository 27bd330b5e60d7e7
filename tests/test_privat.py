from __future__ import annotations

from datetime import datetime

import pytest

from statement_parser.banks.privat import PrivatExtractor
from statement_parser.banks.trustee import TrusteeExtractor
from statement_parser.document import StatementDocument
from statement_parser.models import TransactionKind


STATEMENT = "\n".join(
    [
        "PrivatBank",
        "Statement for the period 01.03.2024 - 31.03.2024",
        "Card number: 5168 **** **** 4321",
        "Date        Time   Description                  Amount      Currency  Balance",
        "01.03.2024  08:15  Silpo supermarket            -1 234,56   UAH       15 000,00",
        "02.03.2024  10:00  Salary transfer              25 000,00   UAH       40 000,00",
        "                   from TOV Roga i Kopyta",
        "05.03.2024  21:40  Netflix.com                  −349,00     UAH       39 651,00",
        "31.02.2024  12:00  Impossible date              -10,00      UAH       39 641,00",
        "Balance at the end of period: 39 641,00 UAH",
    ]
)

STATEMENT_UA = "\n".join(
    [
        "ПриватБанк",
        "Виписка за період з 01.04.2024 по 30.04.2024",
        "Картка: 5168 **** **** 4321",
        "Дата        Час    Опис                         Сума        Валюта",
        "03.04.2024  09:30  АТБ маркет                   -215,40     UAH",
        "стор. 1",
        "04.04.2024  18:05  Uber trip                    -120,00     UAH",
        "Вихідний залишок 1 000,00 UAH",
    ]
)


def _doc(text: str) -> StatementDocument:
    return StatementDocument.from_pdf_text(text, filename="privat.pdf")


def test_probe():
    assert PrivatExtractor().supports(_doc(STATEMENT))
    assert PrivatExtractor().supports(_doc(STATEMENT_UA))
    assert not TrusteeExtractor().supports(_doc(STATEMENT))


def test_extract_english_statement():
    batch = PrivatExtractor().extract(_doc(STATEMENT))

    assert len(batch.transactions) == 3
    assert len(batch.skipped) == 1
    assert "Invalid date" in batch.skipped[0].reason

    silpo, salary, netflix = batch.transactions
    assert silpo.date == datetime(2024, 3, 1, 8, 15)
    assert silpo.amount == pytest.approx(1234.56)
    assert silpo.kind is TransactionKind.EXPENSE
    assert silpo.currency == "UAH"

    assert salary.description == "Salary transfer from TOV Roga i Kopyta"
    assert salary.amount == pytest.approx(25000.0)
    assert salary.kind is TransactionKind.INCOME
    assert salary.category_guess == "Salary"

    # typographic minus
    assert netflix.kind is TransactionKind.EXPENSE
    assert netflix.amount == pytest.approx(349.0)
    assert netflix.category_guess == "Bills & Utilities"


def test_summary():
    summary = PrivatExtractor().extract(_doc(STATEMENT)).summary
    assert summary.institution == "PrivatBank"
    assert summary.period == "01.03.2024 - 31.03.2024"
    assert summary.card_number == "5168 **** **** 4321"


def test_ukrainian_labels():
    batch = PrivatExtractor().extract(_doc(STATEMENT_UA))

    assert [t.description for t in batch.transactions] == ["АТБ маркет", "Uber trip"]
    assert batch.transactions[0].date == datetime(2024, 4, 3, 9, 30)
    assert batch.transactions[1].category_guess == "Transport"
    assert batch.summary.period == "01.04.2024 по 30.04.2024"
    assert batch.summary.card_number == "5168 **** **** 4321"


def test_ungrouped_amount_opens_its_own_record():
    text = "\n".join(
        [
            "PrivatBank",
            "Date        Time   Description                  Amount      Currency",
            "01.03.2024  08:15  Silpo supermarket            -15,00      UAH",
            "02.03.2024  10:00  Rent                         -1500,00    UAH",
            "03.03.2024  11:30  Novus                        -20,00      UAH",
            "04.03.2024  12:00  Refund pending               n/a         UAH",
        ]
    )

    batch = PrivatExtractor().extract(_doc(text))

    assert [t.description for t in batch.transactions] == ["Silpo supermarket", "Rent", "Novus"]
    assert batch.transactions[1].amount == pytest.approx(1500.0)
    assert len(batch.skipped) == 1
    assert batch.skipped[0].row == 6
    assert "Unrecognized record line" in batch.skipped[0].reason
