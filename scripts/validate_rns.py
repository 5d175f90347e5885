#!/usr/bin/env python3
"""
Validation script for the wrong-field RNS engine.

Runs a sequence of checks for one (wrong, native) pair:
1. Rns construction and derived bounds
2. Integer decompose / compose roundtrip
3. Reduction witnesses
4. Multiplication witnesses
5. Inversion and division (including zero)
6. Comparison to the wrong modulus
7. Gadget synthesis with constraint verification

Usage:
    python scripts/validate_rns.py
    python scripts/validate_rns.py --preset pasta_fp_on_pasta_fq
    python scripts/validate_rns.py --config configs/secp256k1_scalar_on_bn254.yaml --samples 200
    python scripts/validate_rns.py --output-dir runs/validate   # JSONL logs
"""

import argparse
import os
import random
import sys
import time
import traceback
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from wrongfield.config import RnsConfig, get_preset, load_config
from wrongfield.circuit import IntegerChip, Region, Offset, Value
from wrongfield.logging import SynthesisLogger, create_manifest


def section(name: str):
    print(f"\n{'='*60}")
    print(f"  {name}")
    print(f"{'='*60}")


def check(name: str, passed: bool, detail: str = ""):
    status = "PASS" if passed else "FAIL"
    mark = "✓" if passed else "✗"
    print(f"  [{status}] {mark} {name}" + (f" -- {detail}" if detail else ""))
    return passed


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Validate the wrong-field RNS engine")
    parser.add_argument("--config", type=str, default=None,
                        help="YAML config file (overrides --preset)")
    parser.add_argument("--preset", type=str, default="secp256k1_base_on_bn254",
                        help="Named preset from wrongfield.config.PRESETS")
    parser.add_argument("--samples", type=int, default=None,
                        help="Random samples per section (default: from config)")
    parser.add_argument("--output-dir", type=str, default=None,
                        help="Write manifest and JSONL logs here")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    config = load_config(args.config) if args.config else get_preset(args.preset)
    if args.samples is not None:
        config = RnsConfig.from_dict({**config.to_dict(), "n_samples": args.samples})

    print("wrongfield RNS Validation Suite")
    print(f"Python: {sys.version}")
    print(f"CWD: {os.getcwd()}")
    print(f"Config: {config.to_dict()}")

    results = []
    rng = random.Random(config.seed)
    n = config.n_samples

    # ---------------------------------------------------------------
    # 1. Construction
    # ---------------------------------------------------------------
    section("1. Rns Construction")

    try:
        t0 = time.time()
        rns = config.build_rns()
        dt = time.time() - t0
    except Exception as e:
        results.append(check("Rns.construct", False, str(e)))
        traceback.print_exc()
        return 1

    results.append(check("Rns.construct", True, f"{dt:.3f}s"))
    for key, value in rns.summary().items():
        print(f"    {key:28s} {value}")
    results.append(check("binary * native > wrong^2",
                         rns.crt_modulus > rns.wrong_modulus ** 2))
    results.append(check("base_aux is a multiple of wrong modulus",
                         rns.base_aux.value() % rns.wrong_modulus == 0))

    w = rns.wrong_modulus

    # ---------------------------------------------------------------
    # 2. Roundtrip
    # ---------------------------------------------------------------
    section("2. Integer Roundtrip")

    try:
        all_ok = True
        for _ in range(n):
            x = rng.randrange(w)
            a = rns.new(x)
            if a.value() != x or rns.new_from_bytes_le(a.to_bytes_le(rns.wrong.byte_len)).value() != x:
                all_ok = False
                print(f"    FAIL: x={hex(x)}")
                break
        results.append(check(f"decompose / compose ({n} values)", all_ok))
    except Exception as e:
        results.append(check("Integer roundtrip", False, str(e)))
        traceback.print_exc()

    # ---------------------------------------------------------------
    # 3. Reduce
    # ---------------------------------------------------------------
    section("3. Reduction Witnesses")

    try:
        all_ok = True
        for _ in range(n):
            limbs = [rng.randrange(rns.max_unreduced_limb + 1) for _ in range(4)]
            a = rns.new_from_limbs(limbs)
            ctx = rns.reduce(a)
            if ctx.result.value() != a.value() % w:
                all_ok = False
                break
        results.append(check(f"reduce of unreduced integers ({n})", all_ok))
    except Exception as e:
        results.append(check("reduce", False, str(e)))
        traceback.print_exc()

    # ---------------------------------------------------------------
    # 4. Mul
    # ---------------------------------------------------------------
    section("4. Multiplication Witnesses")

    try:
        all_ok = True
        t0 = time.time()
        for _ in range(n):
            x, y = rng.randrange(w), rng.randrange(w)
            ctx = rns.mul(rns.new(x), rns.new(y))
            if ctx.result.value() != (x * y) % w or ctx.quotient.value != (x * y) // w:
                all_ok = False
                break
        dt = time.time() - t0
        results.append(check(f"mul of field elements ({n})", all_ok, f"{dt:.3f}s"))
    except Exception as e:
        results.append(check("mul", False, str(e)))
        traceback.print_exc()

    # ---------------------------------------------------------------
    # 5. Invert / Div
    # ---------------------------------------------------------------
    section("5. Inversion and Division")

    try:
        all_ok = True
        for _ in range(max(1, n // 10)):
            x = rng.randrange(1, w)
            inv = rns.invert(rns.new(x))
            if inv is None or (inv.value() * x) % w != 1:
                all_ok = False
                break
        results.append(check("invert of non-zero elements", all_ok))
        results.append(check("invert of zero is None", rns.invert(rns.zero()) is None))
        results.append(check("div by zero is None", rns.div(rns.one(), rns.zero()) is None))
    except Exception as e:
        results.append(check("invert / div", False, str(e)))
        traceback.print_exc()

    # ---------------------------------------------------------------
    # 6. Compare
    # ---------------------------------------------------------------
    section("6. Comparison to Modulus")

    try:
        below = rns.compare_to_modulus(rns.new_from_big(w - 1))
        above = rns.compare_to_modulus(rns.new_from_big(w))
        results.append(check("w - 1 is canonical", not below.borrow[-1]))
        results.append(check("w is not canonical", above.borrow[-1]))
    except Exception as e:
        results.append(check("compare_to_modulus", False, str(e)))
        traceback.print_exc()

    # ---------------------------------------------------------------
    # 7. Gadgets
    # ---------------------------------------------------------------
    section("7. Gadget Synthesis")

    logger = SynthesisLogger(Path(args.output_dir), name="validate") if args.output_dir else None
    try:
        if args.output_dir:
            create_manifest("validate", config.to_dict(), rns).save(
                Path(args.output_dir) / "manifest.json")

        chip = IntegerChip.configure(rns, logger=logger)
        region, offset = Region("validate"), Offset()
        x, y = rng.randrange(w), rng.randrange(w)

        t0 = time.time()
        a = chip.range_assign_integer(region, Value.known(rns.new(x)), chip.remainder_msl_bits, offset)
        b = chip.range_assign_integer(region, Value.known(rns.new(y)), chip.remainder_msl_bits, offset)
        c = chip.mul(region, a, b, offset)
        d = chip.reduce(region, chip.sub(region, chip.add(region, a, b, offset), c, offset), offset)
        quotient, cond = chip.div(region, d, b, offset)
        chip.assert_in_field(region, quotient, offset)
        dt = time.time() - t0

        failures = chip.verify(region)
        if logger:
            logger.log_failures(failures, region=region.name)
            logger.log_metrics({"stats": region.stats(), "synthesis_sec": dt,
                                "tables": chip.range_chip.table_sizes})

        print(f"    region stats: {region.stats()}")
        results.append(check("constraints satisfied", not failures,
                             f"{len(failures)} failures, {dt:.3f}s"))
        expected = ((x + y - x * y) * pow(y, -1, w)) % w if y else None
        got = quotient.integer().unwrap().value()
        results.append(check("div gadget result", y == 0 or got == expected))
        results.append(check("div condition flag", cond.value.unwrap() == int(y == 0)))
    except Exception as e:
        results.append(check("gadget synthesis", False, str(e)))
        traceback.print_exc()
    finally:
        if logger:
            logger.close()
            print(f"    log summary: {logger.summary}")

    # ---------------------------------------------------------------
    # Summary
    # ---------------------------------------------------------------
    section("Summary")

    n_pass = sum(1 for r in results if r)
    n_fail = sum(1 for r in results if not r)
    n_total = len(results)

    print(f"\n  {n_pass}/{n_total} checks passed, {n_fail} failed")

    if n_fail == 0:
        print("\n  All checks PASSED.")
    else:
        print("\n  Some checks FAILED. Review output above.")

    return 0 if n_fail == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
