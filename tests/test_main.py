import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import main
from models import ClientAccount


class TestRenderReport:
    def test_rows_sorted_by_client_with_one_digit(self):
        accounts = {
            2: ClientAccount(client_id=2, available=Decimal("2")),
            1: ClientAccount(client_id=1, available=Decimal("1.5"), held=Decimal("0.25"), locked=True),
        }

        assert main.render_report(accounts) == [
            "client,available,held,total,locked",
            "1,1.5,0.2,1.8,true",
            "2,2.0,0.0,2.0,false",
        ]

    def test_empty(self):
        assert main.render_report({}) == ["client,available,held,total,locked"]


class TestMain:
    def test_usage_without_arguments(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["main.py"])

        assert main.main() == 1
        assert "Usage" in capsys.readouterr().err

    def test_missing_file(self, monkeypatch, capsys, tmp_path):
        monkeypatch.setattr(sys, "argv", ["main.py", str(tmp_path / "missing.csv")])

        assert main.main() == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_scenarios_end_to_end(self, monkeypatch, capsys, tmp_path):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 1, 1, 100.0",
            "withdrawal, 1, 2, 50.0",
            "dispute, 1, 2,",
            "chargeback, 1, 2,",
            "deposit, 2, 3, 2.0",
            "resolve, 2, 3,",
        ]))
        monkeypatch.setattr(sys, "argv", ["main.py", str(csv_file)])

        assert main.main() == 0
        assert capsys.readouterr().out.splitlines() == [
            "client,available,held,total,locked",
            "1,100.0,0.0,100.0,true",
            "2,2.0,0.0,2.0,false",
        ]
