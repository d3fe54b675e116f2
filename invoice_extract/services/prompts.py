"""
System instructions sent to the language model.

The prompt is fixed per mode: the same mode always renders the same text,
so any change in output comes from the document, not from the prompt.
"""

from ..models.invoice import ExtractionMode

# Key under which multi-invoice responses list their invoices
INVOICES_KEY = "invoices"

FORMATTING_RULES = """Follow these formatting rules:

1. Dates must be ISO 8601 calendar dates (YYYY-MM-DD) with no time component
2. Monetary values must be plain decimal numbers (e.g. 1234.56)
3. Remove currency symbols and thousands separators from all amounts
4. Use null for any field whose value is not present in the invoice
5. Payment status must be one of: Paid, Unpaid, Overdue, Partial (or null)
6. Keep line items in the order they appear in the document
7. Respond with the JSON object only, no commentary and no markdown"""

SINGLE_INVOICE_SCHEMA = """{
  "invoiceNumber": "string",
  "invoiceDate": "YYYY-MM-DD",
  "dueDate": "YYYY-MM-DD",
  "paymentTerms": "string",

  "clientInfo": {
    "name": "string",
    "contactPerson": "string",
    "address": {
      "street": "string",
      "city": "string",
      "state": "string",
      "zip": "string",
      "country": "string"
    },
    "email": "string",
    "phone": "string"
  },

  "businessInfo": {
    "name": "string",
    "address": {
      "street": "string",
      "city": "string",
      "state": "string",
      "zip": "string",
      "country": "string"
    },
    "email": "string",
    "phone": "string",
    "taxId": "string"
  },

  "items": [
    {
      "description": "string",
      "quantity": number,
      "unitPrice": number,
      "lineTotal": number
    }
  ],

  "subtotal": number,
  "discount": number,
  "taxRate": number,
  "taxAmount": number,
  "totalAmount": number,

  "paymentDetails": {
    "method": "string",
    "status": "Paid|Unpaid|Overdue|Partial",
    "paymentDate": "YYYY-MM-DD",
    "transactionReference": "string",
    "balanceDue": number
  }
}"""

MULTI_INVOICE_SCHEMA = """{
  "%s": [
    {
      "invoiceNumber": "string",
      "companyFrom": "string",
      "invoiceDate": "YYYY-MM-DD",
      "items": [
        {
          "itemCode": "string",
          "description": "string",
          "quantity": number,
          "unit": "string",
          "pricePerItem": number,
          "grossTotal": number,
          "vatAmount": number,
          "netTotal": number
        }
      ],
      "grossTotal": number,
      "vatTotal": number,
      "netTotal": number
    }
  ]
}""" % INVOICES_KEY

SINGLE_INTRO = (
    "Extract the following information from this invoice and return it as a "
    "JSON object with the exact structure shown below."
)

MULTI_INTRO = (
    "The following document may contain one or more invoices. Extract every "
    "invoice, in the order they appear, and return them as a JSON object with "
    f'the exact structure shown below. Use an empty "{INVOICES_KEY}" list if no '
    "invoice is found."
)


def build_prompt(mode: ExtractionMode) -> str:
    mode = ExtractionMode(mode)
    if mode is ExtractionMode.MULTI:
        intro, schema = MULTI_INTRO, MULTI_INVOICE_SCHEMA
    else:
        intro, schema = SINGLE_INTRO, SINGLE_INVOICE_SCHEMA

    return f"{intro}\n\n{FORMATTING_RULES}\n\nExpected JSON structure:\n{schema}"
