import unittest

from rowramp.core.interpolate import interpolate_row, lerp, ramp_fraction
from rowramp.core.model import Numeric, Text
from rowramp.core.rowparse import parse_cell, parse_row


def plain_values(row):
    return [c.value for c in row]


class RowParserTests(unittest.TestCase):
    def test_mixed_row_is_typed_per_cell(self):
        row = parse_row(["3.5", "abc", "", "-2"])
        self.assertEqual([3.5, "abc", "", -2], plain_values(row))
        self.assertEqual(["numeric", "text", "text", "numeric"], [c.kind for c in row])

    def test_non_finite_text_stays_text(self):
        for raw in ("nan", "NaN", "inf", "-inf", "Infinity"):
            self.assertEqual(Text(raw), parse_cell(raw), raw)

    def test_numeric_forms(self):
        self.assertEqual(Numeric(1000.0), parse_cell("1e3"))
        self.assertEqual(Numeric(0.25), parse_cell(" 0.25 "))
        self.assertEqual(Text("12abc"), parse_cell("12abc"))


class InterpolationTests(unittest.TestCase):
    def setUp(self):
        self.a = parse_row(["0.1", "start", "5"])
        self.b = parse_row(["0.3", "end", "foo"])

    def test_endpoints_are_exact(self):
        self.assertEqual(self.a, interpolate_row(self.a, self.b, 0.0))
        self.assertEqual(self.b, interpolate_row(self.a, self.b, 1.0))
        # 0.1 + (0.3 - 0.1) * 1 would be 0.30000000000000004
        self.assertEqual(0.3, interpolate_row(self.a, self.b, 1.0)[0].value)

    def test_text_and_mixed_columns_snap_only_at_completion(self):
        for frac in (0.0, 0.25, 0.5, 0.999):
            row = interpolate_row(self.a, self.b, frac)
            self.assertEqual(Text("start"), row[1])
            self.assertEqual(Numeric(5.0), row[2])
        done = interpolate_row(self.a, self.b, 1.0)
        self.assertEqual(Text("end"), done[1])
        self.assertEqual(Text("foo"), done[2])

    def test_numeric_moves_monotonically_without_overshoot(self):
        for a, b in ((0.0, 10.0), (7.3, -2.9), (0.1, 0.3), (1e9, 1e9 + 3)):
            prev = a
            for k in range(101):
                v = lerp(a, b, k / 100)
                self.assertGreaterEqual(v, min(a, b))
                self.assertLessEqual(v, max(a, b))
                if b >= a:
                    self.assertGreaterEqual(v, prev)
                else:
                    self.assertLessEqual(v, prev)
                prev = v

    def test_fraction_is_clamped(self):
        self.assertEqual(0.16, ramp_fraction(16, 100))
        self.assertEqual(1.0, ramp_fraction(112, 100))
        self.assertEqual(1.0, ramp_fraction(5, 0))
