from __future__ import annotations

import unittest

from app.domain.affiliate_report import ReportType
from app.mappers.schema_detector import detect_report_type, normalize_header


class TestNormalizeHeader(unittest.TestCase):
    def test_lowercases_and_trims(self) -> None:
        self.assertEqual(normalize_header("  Order ID "), "order id")

    def test_drops_leading_byte_order_mark(self) -> None:
        self.assertEqual(normalize_header("\ufeffID do pedido"), "id do pedido")


class TestDetectReportType(unittest.TestCase):
    def test_english_transaction_headers(self) -> None:
        headers = ["Order id", "Item id", "Purchase Time", "Net Commission"]
        self.assertIs(detect_report_type(headers), ReportType.TRANSACTIONS)

    def test_portuguese_transaction_headers(self) -> None:
        headers = ["ID do pedido", "ID do item", "Horário do pedido"]
        self.assertIs(detect_report_type(headers), ReportType.TRANSACTIONS)

    def test_commission_header_alone_marks_transactions(self) -> None:
        headers = ["Data", "Comissão líquida do afiliado(R$)"]
        self.assertIs(detect_report_type(headers), ReportType.TRANSACTIONS)

    def test_transactions_win_over_click_headers(self) -> None:
        headers = ["Click Time", "Order id", "Item id"]
        self.assertIs(detect_report_type(headers), ReportType.TRANSACTIONS)

    def test_click_headers(self) -> None:
        headers = ["Click id", "Click Time", "Region", "Sub_id1"]
        self.assertIs(detect_report_type(headers), ReportType.CLICKS)

    def test_portuguese_click_headers(self) -> None:
        headers = ["Hora do clique", "Região", "Origem"]
        self.assertIs(detect_report_type(headers), ReportType.CLICKS)

    def test_bom_prefixed_first_header(self) -> None:
        headers = ["\ufeffOrder id", "Item id"]
        self.assertIs(detect_report_type(headers), ReportType.TRANSACTIONS)

    def test_unrelated_headers_are_unrecognized(self) -> None:
        headers = ["name", "email", "signup date"]
        self.assertIs(detect_report_type(headers), ReportType.UNRECOGNIZED)

    def test_empty_header_row_is_unrecognized(self) -> None:
        self.assertIs(detect_report_type([]), ReportType.UNRECOGNIZED)
        self.assertIs(detect_report_type(["", ""]), ReportType.UNRECOGNIZED)


if __name__ == "__main__":
    unittest.main()
