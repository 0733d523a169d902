import tempfile
import unittest
from pathlib import Path

import pandas as pd
from scipy.io import loadmat

from rowramp.core.config import output_settings, playback_settings
from rowramp.core.engine import PlaybackEngine
from rowramp.core.model import Dataset
from rowramp.core.plotting import save_playback_plot
from rowramp.core.recorder import Recorder
from rowramp.core.scheduler import ManualScheduler
from rowramp.main import main, render


def _recorded_run(hold_at_end=False):
    rec = Recorder(tick_ms=16)
    sched = ManualScheduler()
    eng = PlaybackEngine(rec, scheduler=sched, tick_ms=16, ramp_ms=32, hold_at_end=hold_at_end)
    eng.load(Dataset.from_rows(["x", "mode"], [["0", "a"], ["4", "b"], ["8", "c"]]))
    return eng, sched, rec


class RecorderTests(unittest.TestCase):
    def test_dataframe_has_time_axis_and_columns(self):
        eng, sched, rec = _recorded_run()
        fired = render(eng, sched, max_ticks=1000)
        self.assertEqual(4, fired)
        df = rec.to_dataframe()
        self.assertEqual(["t_ms", "x", "mode"], list(df.columns))
        self.assertEqual([0, 16, 32, 48], df["t_ms"].tolist())
        self.assertEqual([0.0, 2.0, 4.0, 6.0], df["x"].tolist())
        self.assertEqual(["a", "a", "b", "b"], df["mode"].tolist())

    def test_render_with_hold_records_final_row(self):
        eng, sched, rec = _recorded_run(hold_at_end=True)
        self.assertEqual(5, render(eng, sched, max_ticks=1000))
        self.assertEqual({"x": 8.0, "mode": "c"}, rec.records[-1].as_dict())
        self.assertFalse(eng.running)

    def test_write_csv_and_mat(self):
        eng, sched, rec = _recorded_run()
        render(eng, sched, max_ticks=1000)
        with tempfile.TemporaryDirectory() as tmpdir:
            written = rec.write(Path(tmpdir) / "run", fmt="both", mat_variable="pb")
            self.assertEqual(["run.csv", "run.mat"], [p.name for p in written])

            df = pd.read_csv(written[0])
            self.assertEqual([0.0, 2.0, 4.0, 6.0], df["x"].tolist())

            mat = loadmat(written[1], squeeze_me=True, struct_as_record=False)
            self.assertEqual([0.0, 2.0, 4.0, 6.0], list(mat["pb"].x))

    def test_reload_with_new_columns_keeps_values_under_their_names(self):
        rec = Recorder(tick_ms=16)
        sched = ManualScheduler()
        eng = PlaybackEngine(rec, scheduler=sched, tick_ms=16, ramp_ms=32)
        eng.load(Dataset.from_rows(["x", "label"], [["0", "a"]]))
        eng.start()
        sched.advance(1)
        eng.load(Dataset.from_rows(["tag", "y"], [["q", "5"]]))
        eng.start()
        sched.advance(1)

        df = rec.to_dataframe()
        self.assertEqual(["t_ms", "x", "label", "tag", "y"], list(df.columns))
        self.assertEqual(("q", 5.0), (df["tag"].iloc[1], df["y"].iloc[1]))
        self.assertEqual(0.0, df["x"].iloc[0])
        self.assertTrue(pd.isna(df["x"].iloc[1]))
        self.assertTrue(pd.isna(df["label"].iloc[1]))

        with tempfile.TemporaryDirectory() as tmpdir:
            written = rec.write(Path(tmpdir) / "run", fmt="both")
            self.assertEqual(["run.csv", "run.mat"], [p.name for p in written])
            self.assertEqual(["q"], pd.read_csv(written[0])["tag"].dropna().tolist())

    def test_nothing_recorded_writes_nothing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            self.assertEqual([], Recorder().write(Path(tmpdir) / "run"))

    def test_plot_skips_text_only_recordings(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            df = pd.DataFrame({"t_ms": [0, 16], "mode": ["a", "b"]})
            self.assertIsNone(save_playback_plot(df, Path(tmpdir) / "p.png", "text"))
            df["x"] = [0.0, 1.0]
            out = save_playback_plot(df, Path(tmpdir) / "p.png", "mixed")
            self.assertTrue(out.exists())


class ConfigTests(unittest.TestCase):
    def test_defaults_and_clamping(self):
        pb = playback_settings({"playback": {"tick_ms": 0, "ramp_ms": -3}})
        self.assertEqual((1, 1), (pb.tick_ms, pb.ramp_ms))
        self.assertFalse(pb.hold_at_end)
        default = playback_settings({})
        self.assertEqual((16, 500), (default.tick_ms, default.ramp_ms))

    def test_null_values_fall_back_to_defaults(self):
        pb = playback_settings({"playback": {"tick_ms": None, "ramp_ms": None, "max_ticks": None}})
        self.assertEqual((16, 500), (pb.tick_ms, pb.ramp_ms))
        self.assertEqual(100_000, pb.max_ticks)

    def test_unknown_output_format_falls_back_to_csv(self):
        self.assertEqual("csv", output_settings({"output": {"format": "xlsx"}}).format)


class MainRenderTests(unittest.TestCase):
    def test_render_mode_writes_recording(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            (tmp / "curve.csv").write_text("x,label\n0,start\n10,end\n", encoding="utf-8")
            cfg = tmp / "config.yaml"
            cfg.write_text(
                "input:\n"
                f"  path: {tmp / 'curve.csv'}\n"
                "mode: render\n"
                "playback: {tick_ms: 16, ramp_ms: 100}\n"
                f"output: {{root: {tmp / 'out'}, stdout: false, format: csv, plot: false}}\n"
                "logging: {verbose: false}\n",
                encoding="utf-8",
            )
            self.assertEqual(0, main([str(cfg)]))
            df = pd.read_csv(tmp / "out" / "curve.csv")
            self.assertEqual(7, len(df))
            self.assertAlmostEqual(9.6, df["x"].iloc[-1])


class EmitterTests(unittest.TestCase):
    def test_json_lines_keep_column_order(self):
        import io
        from rowramp.core.emitters import JsonLinesEmitter
        from rowramp.core.model import Record
        from rowramp.core.rowparse import parse_row

        buf = io.StringIO()
        JsonLinesEmitter(buf)(Record.build(["b", "a"], parse_row(["1.5", "x"])))
        self.assertEqual('{"b": 1.5, "a": "x"}\n', buf.getvalue())

    def test_fan_out_calls_every_sink_before_raising(self):
        from rowramp.core.emitters import FanOutEmitter

        seen = []

        def broken(record):
            raise RuntimeError("sink down")

        with self.assertRaises(RuntimeError):
            FanOutEmitter(broken, seen.append)("rec")
        self.assertEqual(["rec"], seen)
