"""
Flatten stored invoices into rows for grid review.

Each line item becomes one row carrying its invoice's header fields, and
every invoice ends with a ``TOTAL FOR INVOICE`` row holding the header
totals.
"""

TOTAL_LABEL = "TOTAL FOR INVOICE"


def _single_rows(invoice) -> list[dict]:
    header = {
        "id": invoice.id,
        "mode": invoice.mode,
        "invoiceNumber": invoice.invoice_number,
        "company": invoice.business_info.name,
        "invoiceDate": invoice.invoice_date,
    }
    rows = [
        {
            **header,
            "description": item.description,
            "quantity": item.quantity,
            "unitPrice": item.unit_price,
            "lineTotal": item.line_total,
            "taxAmount": None,
            "isTotal": False,
        }
        for item in invoice.items
    ]
    rows.append({
        **header,
        "description": TOTAL_LABEL,
        "quantity": None,
        "unitPrice": None,
        "lineTotal": invoice.total_amount,
        "taxAmount": invoice.tax_amount,
        "isTotal": True,
    })
    return rows


def _multi_rows(invoice) -> list[dict]:
    header = {
        "id": invoice.id,
        "mode": invoice.mode,
        "invoiceNumber": invoice.invoice_number,
        "company": invoice.company_from,
        "invoiceDate": invoice.invoice_date,
    }
    rows = [
        {
            **header,
            "itemCode": item.item_code,
            "description": item.description,
            "quantity": item.quantity,
            "unit": item.unit,
            "unitPrice": item.price_per_item,
            "lineTotal": item.gross_total,
            "taxAmount": item.vat_amount,
            "netTotal": item.net_total,
            "isTotal": False,
        }
        for item in invoice.items
    ]
    rows.append({
        **header,
        "itemCode": None,
        "description": TOTAL_LABEL,
        "quantity": None,
        "unit": None,
        "unitPrice": None,
        "lineTotal": invoice.gross_total,
        "taxAmount": invoice.vat_total,
        "netTotal": invoice.net_total,
        "isTotal": True,
    })
    return rows


def flatten_invoices(invoices: list) -> list[dict]:
    rows = []
    for invoice in invoices:
        if invoice.mode == "multi":
            rows.extend(_multi_rows(invoice))
        else:
            rows.extend(_single_rows(invoice))
    return rows
