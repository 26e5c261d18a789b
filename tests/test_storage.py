from __future__ import annotations

import tempfile
from pathlib import Path
import unittest

from coachpdf import config
from coachpdf.models import reset_engine
from coachpdf.storage import (
    export_count,
    export_filename,
    list_exports,
    record_export,
    save_pdf,
    suggested_filename,
)

from helpers import sample_plan


class StorageTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        config.set_out_dir(Path(self.temp_dir.name))
        reset_engine()

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_filename_from_client(self) -> None:
        self.assertEqual(export_filename(sample_plan(client_name="Mario Rossi")), "scheda-mario-rossi.pdf")
        self.assertEqual(export_filename(sample_plan(client_name="", name="Forza base")), "scheda-forza-base.pdf")
        self.assertEqual(export_filename(sample_plan(client_name="", name="", id="")), "scheda.pdf")

    def test_export_path_is_a_prefix(self) -> None:
        self.assertEqual(suggested_filename("scheda.pdf", "Documenti/Schede/"), "Documenti_Schede_scheda.pdf")
        self.assertEqual(suggested_filename("scheda.pdf", "../fuori"), "fuori_scheda.pdf")
        self.assertEqual(suggested_filename("scheda.pdf", "  "), "scheda.pdf")

    def test_save_stays_in_output_dir(self) -> None:
        path = save_pdf(b"%PDF-1.4", "scheda.pdf", export_path="/tmp/altrove")
        self.assertEqual(path.parent, config.OUT_DIR)
        self.assertEqual(path.read_bytes(), b"%PDF-1.4")

    def test_exports_are_counted(self) -> None:
        self.assertEqual(export_count(), 0)
        plan = sample_plan()
        record_export(plan, config.OUT_DIR / "scheda-mario-rossi.pdf", 2)
        record_export(plan, config.OUT_DIR / "scheda-mario-rossi.pdf", 3)
        self.assertEqual(export_count(), 2)
        records = list_exports()
        self.assertEqual(len(records), 2)
        self.assertEqual(records[0].page_count, 3)
        self.assertEqual(records[0].client_name, "Mario Rossi")


if __name__ == "__main__":
    unittest.main()
