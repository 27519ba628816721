"""HarmSyn command line tool.

Usage:
    harmsyn <input> <output> [options]

The input can be a WAV file (analyzed) or a text file with harmonic
records. The output can be a WAV file (synthesized) or a text file.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

import structlog

from harmsyn.analysis.analyzer import AnalParms, analyze_harmonic_signal
from harmsyn.audio import load_signal, save_audio
from harmsyn.config import settings
from harmsyn.dsp.interpolation import INTERPOLATION_METHODS
from harmsyn.errors import HarmSynError
from harmsyn.intdata.model import HarmSynRecord, convert_records_to_def
from harmsyn.intdata.text_format import create_harm_syn_file, parse_harm_syn_file
from harmsyn.synthesis.harmonic_mod import decode_harmonic_mod_string
from harmsyn.synthesis.synth import SynParms, synthesize_harmonic_signal

logger = structlog.get_logger()

EXIT_FAILURE = 99

_DEFAULTS = AnalParms()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="harmsyn",
        description=(
            "HarmSyn - Harmonic Synthesizer. An analysis and synthesis algorithm "
            "for quasi-periodic signals, e.g. vowels."
        ),
    )
    parser.add_argument("input", type=Path, help="WAV file to analyze or text file with harmonic records")
    parser.add_argument("output", type=Path, help="WAV file to synthesize or text file to write")

    out = parser.add_argument_group("text output options")
    out.add_argument(
        "--min-relevant-amplitude",
        type=float,
        default=settings.min_relevant_amplitude,
        help="Lower amplitudes are omitted in the text output file [dB]",
    )

    anal = parser.add_argument_group("analysis options")
    anal.add_argument("--start-frequency", type=float, help="Start F0 [Hz], pitch detection if omitted")
    anal.add_argument("--start-frequency-min", type=float, default=_DEFAULTS.start_frequency_min)
    anal.add_argument("--start-frequency-max", type=float, default=_DEFAULTS.start_frequency_max)
    anal.add_argument("--tracking-start-pos", type=float, help="Tracking start position [s]")
    anal.add_argument("--tracking-start-level", type=float, default=_DEFAULTS.tracking_start_level)
    anal.add_argument(
        "--tracking-interval",
        type=float,
        default=_DEFAULTS.tracking_interval * 1000,
        help="Tracking step [ms]",
    )
    anal.add_argument("--max-frequency-derivative", type=float, default=_DEFAULTS.max_frequency_derivative)
    anal.add_argument("--min-tracking-amplitude", type=float, default=_DEFAULTS.min_tracking_amplitude)
    anal.add_argument("--harmonics", type=int, default=_DEFAULTS.harmonics)
    anal.add_argument("--f-cutoff", type=float, default=_DEFAULTS.f_cutoff)
    anal.add_argument("--shift-factor", type=float, default=_DEFAULTS.shift_factor)
    anal.add_argument("--tracking-rel-window-width", type=float, default=_DEFAULTS.tracking_rel_window_width)
    anal.add_argument("--tracking-window-function", default=_DEFAULTS.tracking_window_function)
    anal.add_argument("--interpolation-interval", type=int, default=_DEFAULTS.interpolation_interval)
    anal.add_argument("--amp-rel-window-width", type=float, default=_DEFAULTS.amp_rel_window_width)
    anal.add_argument("--amp-window-function", default=_DEFAULTS.amp_window_function)

    syn = parser.add_argument_group("synthesis options")
    syn.add_argument("--sample-rate", type=int, default=44100, help="Output sample rate [Hz]")
    syn.add_argument("--interpolation-method", default="akima", choices=INTERPOLATION_METHODS)
    syn.add_argument("--f0-multiplier", type=float, default=1.0)
    syn.add_argument("--freq-shift", type=float, default=0.0, help="Frequency shift [Hz]")
    syn.add_argument(
        "--harmonic-mod",
        default="",
        help='Enable/amplify harmonics, e.g. "2 4", "2*" or "1* 3/-5"',
    )

    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def _anal_parms(args: argparse.Namespace) -> AnalParms:
    return AnalParms(
        start_frequency=args.start_frequency,
        start_frequency_min=args.start_frequency_min,
        start_frequency_max=args.start_frequency_max,
        tracking_start_pos=args.tracking_start_pos,
        tracking_start_level=args.tracking_start_level,
        tracking_interval=args.tracking_interval / 1000,
        max_frequency_derivative=args.max_frequency_derivative,
        min_tracking_amplitude=args.min_tracking_amplitude,
        harmonics=args.harmonics,
        f_cutoff=args.f_cutoff,
        shift_factor=args.shift_factor,
        tracking_rel_window_width=args.tracking_rel_window_width,
        tracking_window_function=args.tracking_window_function,
        interpolation_interval=args.interpolation_interval,
        amp_rel_window_width=args.amp_rel_window_width,
        amp_window_function=args.amp_window_function,
    )


def _syn_parms(args: argparse.Namespace) -> SynParms:
    return SynParms(
        interpolation_method=args.interpolation_method,
        f0_multiplier=args.f0_multiplier,
        freq_shift=args.freq_shift,
        harmonic_mod=decode_harmonic_mod_string(args.harmonic_mod),
        output_sample_rate=args.sample_rate,
    )


def read_input(args: argparse.Namespace) -> list[HarmSynRecord]:
    suffix = args.input.suffix.lower()
    if suffix == ".wav":
        signal, sr = load_signal(args.input)
        return analyze_harmonic_signal(signal, sr, _anal_parms(args))
    if suffix == ".txt":
        return parse_harm_syn_file(args.input.read_text(encoding="utf-8"))
    raise HarmSynError("Unrecognized input file name extension.")


def write_output(args: argparse.Namespace, records: list[HarmSynRecord]) -> None:
    suffix = args.output.suffix.lower()
    if suffix == ".wav":
        syn_parms = _syn_parms(args)
        signal = synthesize_harmonic_signal(convert_records_to_def(records), syn_parms)
        save_audio(signal, args.output, syn_parms.output_sample_rate)
    elif suffix == ".txt":
        args.output.write_text(
            create_harm_syn_file(records, args.min_relevant_amplitude), encoding="utf-8"
        )
    else:
        raise HarmSynError("Unrecognized output file name extension.")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose >= 2 else logging.INFO if args.verbose else logging.WARNING
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))
    try:
        records = read_input(args)
        write_output(args, records)
    except HarmSynError as e:
        print(e, file=sys.stderr)
        return EXIT_FAILURE
    except (OSError, RuntimeError) as e:
        print(f"HarmSyn failed. {e}", file=sys.stderr)
        return EXIT_FAILURE
    logger.info("cli.done", input=str(args.input), output=str(args.output), records=len(records))
    return 0


if __name__ == "__main__":
    sys.exit(main())
