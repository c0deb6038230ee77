"""
Unit tests for the SEBI registry card parser.
"""
import json

from vc_dossier.schemas import FirmRecord
from vc_dossier.services.sebi import parse_registry_cards, SebiRegistryScraper


def _view(title, value):
    title_html = f'<div class="title"><span>{title}</span></div>' if title else '<div class="title"></div>'
    return f'<div class="card-view">{title_html}<div class="value"><span>{value}</span></div></div>'


CARDS = f"""
<div class="fixed-table-body card-table">
  <div class="card-table-left">
    {_view("Name", "ACME VENTURES FUND")}
    {_view("Registration No.", "IN/AIF2/20-21/0001")}
    {_view("Address", "12 Marine Drive")}
    {_view("", "Mumbai 400002")}
    {_view("Contact Person", "Jane Doe")}
    {_view("E-mail", "jane@acmevc.in")}
    {_view("Name", "BETA GROWTH TRUST")}
    {_view("Validity", "Perpetual")}
  </div>
</div>
"""


def test_parse_registry_cards_splits_on_name():
    rows = parse_registry_cards(CARDS)

    assert len(rows) == 2
    assert rows[0]["Name"] == "ACME VENTURES FUND"
    assert rows[0]["Address"] == "12 Marine Drive Mumbai 400002"
    assert rows[0]["E-mail"] == "jane@acmevc.in"
    assert rows[1] == {"Name": "BETA GROWTH TRUST", "Validity": "Perpetual"}


def test_parse_registry_cards_empty():
    assert parse_registry_cards("") == []


def test_registry_rows_become_firm_records(tmp_path):
    records = [FirmRecord.model_validate(row) for row in parse_registry_cards(CARDS)]
    assert records[0].contact_person == "Jane Doe"
    assert records[0].registration_no == "IN/AIF2/20-21/0001"

    path = SebiRegistryScraper.save_records(records, str(tmp_path / "inputs.json"))
    with open(path, encoding="utf-8") as f:
        saved = json.load(f)
    assert saved[1] == {"Name": "BETA GROWTH TRUST", "Validity": "Perpetual"}
