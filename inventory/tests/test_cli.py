"""End-to-end tests for the command-line interface against the fake API."""

import csv
import logging

import pytest

from inventory import cli

from conftest import API_URL


@pytest.fixture(autouse=True)
def use_fake_api(fake_api, monkeypatch):
    monkeypatch.setattr("inventory.client.create_session", lambda: fake_api)
    yield
    # main() configures the package logger; undo it for the next test
    logger = logging.getLogger("inventory")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


def run(*argv):
    return cli.main(["--api-url", API_URL, "--no-log-file", *argv])


class TestProductCommands:
    def test_list_by_screen(self, fake_api, capsys):
        fake_api.add_product(_id="a", name="Multímetro", quantity=1)
        fake_api.add_product(_id="b", name="Bancada", quantity=2)

        assert run("list", "--screen", "eletronica") == 0

        out = capsys.readouterr().out
        assert "Multímetro" in out
        assert "Bancada" not in out
        assert "1 produto(s)" in out

    def test_latest(self, fake_api, capsys):
        fake_api.add_product(_id="a", name="Primeiro", quantity=1)
        fake_api.add_product(_id="b", name="Ultimo", quantity=1)
        assert run("latest") == 0
        out = capsys.readouterr().out
        assert "Ultimo" in out
        assert "Primeiro" not in out

    def test_show(self, fake_api, capsys):
        fake_api.add_product(_id="a", name="Fonte", description="12V", quantity=2)
        assert run("show", "a") == 0
        out = capsys.readouterr().out
        assert "12V" in out
        assert "montagem" in out

    def test_show_unknown(self, capsys):
        assert run("show", "zzz") == 1
        assert "not found" in capsys.readouterr().err

    def test_add_with_fixed_quantity_screen(self, fake_api, capsys):
        assert run("add", "--screen", "montagem", "--name", "Parafusadeira", "--quantity", "7") == 0
        assert fake_api.products[0]["name"] == "Parafusadeira"
        assert fake_api.products[0]["quantity"] == 2
        assert "Created product" in capsys.readouterr().out

    def test_add_on_all_screen_is_listed_there(self, fake_api, capsys):
        assert run("add", "--screen", "todos", "--name", "Alicate") == 0
        assert fake_api.products[0]["quantity"] == 2
        assert run("list", "--screen", "todos") == 0
        assert "Alicate" in capsys.readouterr().out

    def test_add_with_image(self, fake_api, png_file):
        assert run("add", "--name", "Foto", "--quantity", "1", "--image", str(png_file)) == 0
        assert fake_api.products[0]["imageUrl"].endswith("foto.png")

    def test_add_invalid_quantity(self, fake_api, capsys):
        assert run("add", "--name", "x", "--quantity", "abc") == 1
        assert fake_api.products == []
        assert "numeric" in capsys.readouterr().err

    def test_edit_keeps_omitted_fields(self, fake_api):
        fake_api.add_product(
            _id="a", name="Fonte", description="12V", quantity=3,
            imageUrl=f"{API_URL}/uploads/fonte.jpg",
        )
        assert run("edit", "a", "--description", "24V") == 0
        record = fake_api.products[0]
        assert record["name"] == "Fonte"
        assert record["description"] == "24V"
        assert record["quantity"] == 3
        assert record["imageUrl"] == f"{API_URL}/uploads/fonte.jpg"

    def test_delete(self, fake_api, capsys):
        fake_api.add_product(_id="a")
        assert run("delete", "a") == 0
        assert fake_api.products == []

    def test_delete_failure_exit_code(self, fake_api, capsys):
        assert run("delete", "missing") == 1
        assert "Failed to delete" in capsys.readouterr().err

    def test_list_when_api_down(self, fake_api, capsys):
        fake_api.fail("GET", "/produtos", 503)
        assert run("list") == 1

    def test_export_csv(self, fake_api, tmp_path):
        fake_api.add_product(_id="a", name="A", quantity=1, dateAdded="2024-01-01T10:00:00Z")
        fake_api.add_product(_id="b", name="B", quantity=2, dateAdded="2024-02-01T10:00:00Z")
        target = tmp_path / "out" / "produtos.csv"

        assert run("export-csv", str(target)) == 0

        with open(target, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert [row["id"] for row in rows] == ["b", "a"]
        assert rows[0]["category"] == "montagem"
        assert rows[1]["date_added"].startswith("2024-01-01T10:00:00")


class TestNoticeCommands:
    def test_notice_lifecycle(self, fake_api, capsys):
        assert run("notices", "add", "Inventário sexta") == 0
        notice_id = fake_api.notices[0]["_id"]

        assert run("notices", "edit", notice_id, "Inventário segunda") == 0
        assert fake_api.notices[0]["notice"] == "Inventário segunda"

        assert run("notices", "list") == 0
        assert "Inventário segunda" in capsys.readouterr().out

        assert run("notices", "delete", notice_id) == 0
        assert fake_api.notices == []


def test_invalid_api_url(capsys):
    assert cli.main(["--api-url", "ftp://nope", "--no-log-file", "list"]) == 2
    assert "Invalid API URL" in capsys.readouterr().err
