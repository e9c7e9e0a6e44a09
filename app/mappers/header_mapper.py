"""
app/mappers/header_mapper.py

Static header-to-canonical mapping for the two recognized report families.

Aliases are declared per canonical field (many raw spellings may name one
field). The reverse lookup is built once at import time and refuses any
alias that would resolve to two different fields.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from app.domain.affiliate_report import CanonicalField as F
from app.domain.affiliate_report import ReportType
from app.mappers.schema_detector import normalize_header


def _sub_id_aliases(index: int) -> tuple[str, ...]:
    return (f"sub id {index}", f"sub_id{index}", f"subid{index}")


TRANSACTION_HEADER_ALIASES: dict[F, tuple[str, ...]] = {
    F.ORDER_ID: ("order id", "order_id", "id do pedido"),
    F.ITEM_ID: ("item id", "item_id", "id do item"),
    F.PURCHASE_TIME: (
        "purchase time",
        "data da compra",
        "hora da compra",
        "horário do pedido",
        "horario do pedido",
    ),
    F.COMPLETE_TIME: ("complete time", "tempo de conclusão", "tempo de conclusao"),
    F.CLICK_TIME: ("click time", "tempo dos cliques"),
    F.STATUS: ("status",),
    F.ORDER_STATUS: ("order status", "status do pedido"),
    F.CONVERSION_STATUS: ("affiliate item status", "status do item do afiliado"),
    F.BUYER_TYPE: ("buyer type", "status do comprador"),
    F.CHECKOUT_ID: ("checkout id", "payment id", "id do pagamento"),
    F.SHOP_NAME: ("shop name", "nome da loja", "loja"),
    F.SHOP_ID: ("shop id", "id da loja"),
    F.SHOP_TYPE: ("shop type", "tipo da loja"),
    F.ITEM_NAME: ("item name", "nome do item"),
    F.ITEM_MODEL_ID: ("model id", "modelo de id"),
    F.PRODUCT_TYPE: ("product type", "tipo de produto"),
    F.PROMOTION_ID: ("promotion id", "id da promoção", "id da promocao"),
    F.CATEGORY_L1: ("category l1", "categoria global l1"),
    F.CATEGORY_L2: ("category l2", "categoria global l2"),
    F.CATEGORY_L3: ("category l3", "categoria global l3"),
    F.ITEM_PRICE: ("price", "item price", "preço(r$)", "preco(r$)"),
    F.QTY: ("qty", "quantity", "qtd"),
    F.ATTRIBUTION_TYPE: ("offer type", "tipo de atribuição", "tipo de atribuicao"),
    F.CAMPAIGN_PARTNER_NAME: ("campaign partner", "parceiro de campanha"),
    F.ACTUAL_AMOUNT: (
        "actual amount",
        "gmv",
        "valor de compra(r$)",
        "valor real",
        "valor gmv",
    ),
    F.REFUND_AMOUNT: ("refund amount", "valor do reembolso(r$)"),
    F.ITEM_SHOPEE_COMMISSION_RATE: (
        "taxa de comissão shopee do item",
        "taxa de comissao shopee do item",
    ),
    F.SHOPEE_COMMISSION: (
        "shopee commission",
        "comissão do item da shopee(r$)",
        "comissao do item da shopee(r$)",
        "comissão shopee(r$)",
        "comissao shopee(r$)",
    ),
    F.ITEM_SELLER_COMMISSION_RATE: (
        "taxa de comissão do vendedor do item",
        "taxa de comissao do vendedor do item",
    ),
    F.BRAND_COMMISSION: ("comissão do item da marca(r$)", "comissao do item da marca(r$)"),
    F.SELLER_COMMISSION: (
        "seller commission",
        "comissão do vendedor(r$)",
        "comissao do vendedor(r$)",
    ),
    F.ITEM_TOTAL_COMMISSION: ("comissão total do item(r$)", "comissao total do item(r$)"),
    F.GROSS_COMMISSION: ("comissão total do pedido(r$)", "comissao total do pedido(r$)"),
    F.TOTAL_COMMISSION: ("total commission", "comissão total", "comissao total"),
    F.MCN_NAME: ("rm vinculada", "id de contrato da rm"),
    F.MCN_FEE_RATE: ("taxa do fee de gestão da rm", "taxa do fee de gestao da rm"),
    F.MCN_FEE: ("fee de gestão da rm(r$)", "fee de gestao da rm(r$)"),
    F.RATE: ("affiliate contract rate", "taxa de contrato do afiliado"),
    F.NET_COMMISSION: (
        "net commission",
        "comissão líquida do afiliado(r$)",
        "comissao liquida do afiliado(r$)",
        "comissão líquida",
        "comissao liquida",
    ),
    F.ITEM_NOTES: ("item notes", "notas do item"),
    F.SUB_ID1: _sub_id_aliases(1),
    F.SUB_ID2: _sub_id_aliases(2),
    F.SUB_ID3: _sub_id_aliases(3),
    F.SUB_ID4: _sub_id_aliases(4),
    F.SUB_ID5: _sub_id_aliases(5),
    F.CHANNEL: ("channel", "canal"),
}

CLICK_HEADER_ALIASES: dict[F, tuple[str, ...]] = {
    F.CLICK_TIME: ("click time", "hora do clique", "data do clique"),
    F.REGION: ("region", "região", "regiao"),
    F.REFERRER: ("referrer", "origem"),
    F.SUB_ID1: _sub_id_aliases(1),
    F.SUB_ID2: _sub_id_aliases(2),
    F.SUB_ID3: _sub_id_aliases(3),
    F.SUB_ID4: _sub_id_aliases(4),
    F.SUB_ID5: _sub_id_aliases(5),
    F.CLICK_PV: ("click pv", "click_pv"),
}


def build_header_lookup(aliases: Mapping[F, Sequence[str]]) -> dict[str, F]:
    """
    Invert a canonical-to-aliases table into a normalized-header lookup.

    Raises ValueError when one normalized alias names two canonical fields.
    """

    lookup: dict[str, F] = {}
    for canonical_field, raw_aliases in aliases.items():
        for alias in (canonical_field.value, *raw_aliases):
            key = normalize_header(alias)
            existing = lookup.get(key)
            if existing is not None and existing is not canonical_field:
                raise ValueError(
                    f"Header alias {alias!r} maps to both "
                    f"{existing.value!r} and {canonical_field.value!r}."
                )
            lookup[key] = canonical_field
    return lookup


_LOOKUPS: dict[ReportType, dict[str, F]] = {
    ReportType.TRANSACTIONS: build_header_lookup(TRANSACTION_HEADER_ALIASES),
    ReportType.CLICKS: build_header_lookup(CLICK_HEADER_ALIASES),
}


class HeaderMapper:
    """
    Maps localized report headers onto canonical field names.
    """

    def __init__(self, lookups: Mapping[ReportType, Mapping[str, F]] | None = None) -> None:
        self._lookups = dict(lookups or _LOOKUPS)

    def map_headers(self, headers: Sequence[str], report_type: ReportType) -> list[str]:
        """
        Return one name per header: the canonical field name when the header
        is known for ``report_type``, otherwise the header unchanged.
        """

        lookup = self._lookup_for(report_type)
        mapped: list[str] = []
        for header in headers:
            canonical_field = lookup.get(normalize_header(header))
            mapped.append(canonical_field.value if canonical_field is not None else header)
        return mapped

    def map_row(
        self,
        *,
        raw_row: Mapping[str, str | None],
        headers: Sequence[str],
        mapped_headers: Sequence[str],
    ) -> dict[str, str | None]:
        """
        Re-key one raw row by mapped header names.

        When several columns map to the same field, a later non-blank value
        replaces an earlier one; a blank value never overwrites.
        """

        mapped_row: dict[str, str | None] = {}
        for header, mapped_name in zip(headers, mapped_headers):
            value = raw_row.get(header)
            if mapped_name in mapped_row and (value is None or not value.strip()):
                continue
            mapped_row[mapped_name] = value
        return mapped_row

    def _lookup_for(self, report_type: ReportType) -> Mapping[str, F]:
        try:
            return self._lookups[report_type]
        except KeyError:
            raise ValueError(f"No header mapping for report type {report_type.value!r}.") from None
