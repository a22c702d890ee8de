"""
Command Line Interface for CrackLab

This module implements the CLI front end for the cracking engine:
- Hash identification and strength prediction
- Multi-phase attacks with progress display
- Live brute force streaming with cancellation
- Guess generation and configuration checks
"""

import argparse
import getpass
import json
import threading
import time
from typing import List, Optional

from ..interfaces import CrackingException, GeneratorKind, ProgressEventType, SessionStatus
from ..config import ConfigManager, CHARSETS
from ..logging_system import setup_logging
from ..models.attack import AttackOptions, AttackPhase, AttackResult
from ..models.profile import TargetProfile
from ..data.loader import load_wordlist
from ..engine import CrackingEngine
from ..services.result_reporter import ResultReporter
from ..services.strength_predictor import format_duration


class CLIColors:
    """ANSI color codes for CLI output"""
    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    UNDERLINE = '\033[4m'


STRENGTH_COLORS = {
    'Very Weak': CLIColors.FAIL,
    'Weak': CLIColors.WARNING,
    'Moderate': CLIColors.OKCYAN,
    'Strong': CLIColors.OKGREEN,
}


class ProgressDisplay:
    """Progress display for long-running operations"""

    def __init__(self, description: str = "Processing"):
        self.description = description
        self.is_running = False
        self._thread = None
        self._progress_data = {}

    def start(self):
        """Start progress display"""
        self.is_running = True
        self._thread = threading.Thread(target=self._display_progress)
        self._thread.daemon = True
        self._thread.start()

    def stop(self):
        """Stop progress display"""
        self.is_running = False
        if self._thread:
            self._thread.join(timeout=1)
        print()

    def update(self, **kwargs):
        """Update progress data"""
        self._progress_data.update(kwargs)

    def _display_progress(self):
        spinner = ['|', '/', '-', '\\']
        i = 0
        while self.is_running:
            status = f"\r{self.description} {spinner[i % len(spinner)]}"
            if self._progress_data:
                status += f" - {self._format_progress_data()}"
            print(status, end='', flush=True)
            time.sleep(0.1)
            i += 1

    def _format_progress_data(self) -> str:
        """Format progress data for display"""
        parts = []
        for key, value in self._progress_data.items():
            if key == 'phase':
                parts.append(f"Phase: {value}")
            elif key == 'attempts':
                parts.append(f"Attempts: {value:,}")
            elif key == 'rate':
                parts.append(f"{value:,.0f} H/s")
            elif key == 'length':
                parts.append(f"Length: {value}")
            elif key == 'candidate':
                parts.append(f"Last: {value}")
            elif key == 'duration':
                parts.append(f"Duration: {value:.1f}s")
        return " | ".join(parts)


class CrackLabCLI:
    """
    Command Line Interface for CrackLab

    The engine is built on first use so that ``config`` and argument
    errors never pay for model initialization.
    """

    def __init__(self, engine: Optional[CrackingEngine] = None):
        self.engine = engine
        self.config_manager: Optional[ConfigManager] = None
        self.progress_display = None
        self.parser = self._setup_argument_parser()

    def _setup_argument_parser(self) -> argparse.ArgumentParser:
        """Setup command line argument parser"""
        parser = argparse.ArgumentParser(
            prog='cracklab',
            description='CrackLab - password auditing and candidate generation engine',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  cracklab identify 5f4dcc3b5aa765d61d8327deb882cf99
  cracklab crack 5f4dcc3b5aa765d61d8327deb882cf99 --phases dictionary rule_mutation
  cracklab crack HASH --name "John Smith" --dob 1990-05-15 --pet rex
  cracklab live HASH --max-length 4 --charset lowercase
  cracklab guess --name "John Smith" --limit 50
  cracklab strength --json
  cracklab config validate
            """
        )

        parser.add_argument('--version', action='version', version='CrackLab 1.0.0')
        parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output')
        parser.add_argument('--config', help='Configuration file path')
        parser.add_argument('--log-dir', help='Directory for log and audit files')

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        identify_parser = subparsers.add_parser('identify', help='Identify hash algorithm')
        identify_parser.add_argument('hash', help='Hex digest')
        identify_parser.add_argument('--json', action='store_true', help='JSON output')

        crack_parser = subparsers.add_parser('crack', help='Run a multi-phase attack')
        crack_parser.add_argument('hash', help='Hex digest')
        crack_parser.add_argument('--algorithm', default='auto', help='md5, sha1, sha256 or auto')
        crack_parser.add_argument('--phases', nargs='+', choices=[kind.value for kind in GeneratorKind],
                                  help='Explicit phase plan')
        crack_parser.add_argument('--wordlist', help='Wordlist file path')
        crack_parser.add_argument('--candidates', help='External candidate list file')
        crack_parser.add_argument('--max-length', type=int, help='Brute force maximum length')
        crack_parser.add_argument('--charset', help=f"Brute force charset ({', '.join(CHARSETS)} or literal)")
        crack_parser.add_argument('--time-budget', type=float, help='Wall-clock budget in seconds')
        crack_parser.add_argument('--dedupe', action='store_true', help='Skip guesses repeated across phases')
        crack_parser.add_argument('--output', help='Write the JSON result to this file')
        crack_parser.add_argument('--json', action='store_true', help='JSON output')
        self._add_profile_arguments(crack_parser)

        live_parser = subparsers.add_parser('live', help='Live brute force with progress')
        live_parser.add_argument('hash', help='Hex digest')
        live_parser.add_argument('--algorithm', default='auto', help='md5, sha1, sha256 or auto')
        live_parser.add_argument('--max-length', type=int, help='Maximum candidate length')
        live_parser.add_argument('--charset', help='Charset name or literal characters')
        live_parser.add_argument('--time-budget', type=float, help='Wall-clock budget in seconds')
        live_parser.add_argument('--json', action='store_true', help='Print every event as JSON')

        guess_parser = subparsers.add_parser('guess', help='Generate guesses without hashing')
        guess_parser.add_argument('--wordlist', help='Wordlist file path')
        guess_parser.add_argument('--limit', type=int, default=100, help='Maximum guesses')
        guess_parser.add_argument('--json', action='store_true', help='JSON output')
        self._add_profile_arguments(guess_parser)

        strength_parser = subparsers.add_parser('strength', help='Predict password strength')
        strength_parser.add_argument('password', nargs='?', help='Password (prompted when omitted)')
        strength_parser.add_argument('--json', action='store_true', help='JSON output')

        config_parser = subparsers.add_parser('config', help='Configuration management')
        config_subparsers = config_parser.add_subparsers(dest='config_command')
        config_subparsers.add_parser('show', help='Show current configuration')
        config_subparsers.add_parser('validate', help='Validate configuration values and paths')

        return parser

    @staticmethod
    def _add_profile_arguments(parser: argparse.ArgumentParser):
        group = parser.add_argument_group('target profile')
        group.add_argument('--name', help='Target full name')
        group.add_argument('--dob', help='Date of birth')
        group.add_argument('--phone', help='Phone number')
        group.add_argument('--pet', help='Pet name')
        group.add_argument('--company', help='Company name')

    def run(self, args: List[str] = None) -> int:
        """
        Run CLI with provided arguments

        Args:
            args: Command line arguments (defaults to sys.argv)

        Returns:
            int: Exit code (0 for success, non-zero for error)
        """
        try:
            parsed_args = self.parser.parse_args(args)

            if not parsed_args.command:
                self.parser.print_help()
                return 0

            self._load_configuration(parsed_args)

            if parsed_args.command == 'identify':
                return self._handle_identify_command(parsed_args)
            elif parsed_args.command == 'crack':
                return self._handle_crack_command(parsed_args)
            elif parsed_args.command == 'live':
                return self._handle_live_command(parsed_args)
            elif parsed_args.command == 'guess':
                return self._handle_guess_command(parsed_args)
            elif parsed_args.command == 'strength':
                return self._handle_strength_command(parsed_args)
            elif parsed_args.command == 'config':
                return self._handle_config_command(parsed_args)
            else:
                self._print_error(f"Unknown command: {parsed_args.command}")
                return 1

        except KeyboardInterrupt:
            self._print_warning("\nOperation cancelled by user")
            return 130
        except CrackingException as e:
            self._print_error(f"{e.kind.value} error: {e.message}")
            return 1
        except Exception as e:
            self._print_error(f"Unexpected error: {e}")
            return 1

    def _load_configuration(self, args):
        self.config_manager = ConfigManager(args.config) if args.config else ConfigManager()

        settings = self.config_manager.settings
        if args.log_dir:
            settings.logging.log_directory = args.log_dir
            settings.logging.audit_enabled = True

        level = 'DEBUG' if args.verbose else settings.logging.log_level
        setup_logging(level, settings.logging.log_directory)

    def _get_engine(self) -> CrackingEngine:
        if self.engine is None:
            self.engine = CrackingEngine(settings=self.config_manager.settings)
        return self.engine

    def _build_profile(self, args) -> Optional[TargetProfile]:
        if not any([args.name, args.dob, args.phone, args.pet, args.company]):
            return None
        return TargetProfile.from_dict({
            'name': args.name, 'dob': args.dob, 'phone': args.phone,
            'pet_name': args.pet, 'company': args.company,
        })

    def _handle_identify_command(self, args) -> int:
        identification = self._get_engine().identify_hash(args.hash)
        if args.json:
            print(json.dumps(identification.to_dict(), indent=2))
            return 0

        self._print_header("Hash Identification")
        print(f"Type:     {identification.algorithm.value}")
        print(f"Length:   {identification.length}")
        print(f"Strength: {identification.strength}")
        return 0

    def _handle_crack_command(self, args) -> int:
        engine = self._get_engine()
        options = AttackOptions(
            phases=args.phases,
            wordlist=load_wordlist(args.wordlist) if args.wordlist else None,
            profile=self._build_profile(args),
            external_candidates=load_wordlist(args.candidates) if args.candidates else None,
            brute_force_max_length=args.max_length,
            brute_force_charset=args.charset,
            time_budget_seconds=args.time_budget,
            deduplicate=True if args.dedupe else None,
        )

        result = self._execute_attack_with_progress(engine, args.hash, args.algorithm, options)

        if args.output:
            file_hash = engine.reporter.export_json(result, args.output)
            self._print_info(f"Result written to {args.output} (sha256 {file_hash})")

        if args.json:
            print(ResultReporter.to_json(result))
        else:
            self._display_attack_result(result)
        return 0

    def _execute_attack_with_progress(self, engine: CrackingEngine, hash_value: str,
                                      algorithm: str, options: AttackOptions) -> AttackResult:
        """Execute attack with progress display"""
        cancel_event = threading.Event()
        self.progress_display = ProgressDisplay("Attacking")

        def on_phase_complete(session_id: str, phase: AttackPhase):
            self.progress_display.update(phase=phase.name, attempts=phase.attempts_attempted)

        engine.orchestrator.set_phase_callback(on_phase_complete)
        future = engine.orchestrator.run_attack_async(hash_value, algorithm, options, cancel_event)
        self.progress_display.start()

        try:
            while not future.done():
                time.sleep(0.1)
        except KeyboardInterrupt:
            cancel_event.set()
            self._print_warning("\nCancelling attack...")
        finally:
            self.progress_display.stop()
            self.progress_display = None

        return future.result()

    def _handle_live_command(self, args) -> int:
        engine = self._get_engine()
        stream = engine.start_live_brute_force(
            args.hash, args.algorithm, max_length=args.max_length,
            charset=args.charset, time_budget_seconds=args.time_budget,
        )

        self.progress_display = None if args.json else ProgressDisplay("Brute forcing")
        if self.progress_display:
            self.progress_display.start()

        last_event = None
        try:
            for event in stream:
                last_event = event
                if args.json:
                    print(json.dumps(event.to_dict()))
                else:
                    self.progress_display.update(
                        length=event.current_length, attempts=event.attempts_so_far,
                        rate=event.hashes_per_second, candidate=event.candidate or '',
                    )
        except KeyboardInterrupt:
            stopped = stream.close()
            if self.progress_display:
                self.progress_display.stop()
                self.progress_display = None
            if not stopped:
                self._print_warning("Worker did not stop within the grace period")
            raise
        finally:
            if self.progress_display:
                self.progress_display.stop()
                self.progress_display = None

        if stream.error is not None:
            self._print_error(f"Brute force aborted: {stream.error}")
            return 1

        if not args.json and last_event is not None:
            if last_event.type is ProgressEventType.CRACKED:
                self._print_success(f"Cracked: {last_event.candidate}")
            else:
                self._print_warning(f"Not found ({last_event.reason})")
            print(f"Attempts: {last_event.attempts_so_far:,} in {last_event.elapsed_ms / 1000:.2f}s")
        return 0

    def _handle_guess_command(self, args) -> int:
        engine = self._get_engine()
        profile = self._build_profile(args)
        wordlist = load_wordlist(args.wordlist) if args.wordlist else None
        result = engine.generate_guesses(wordlist=wordlist, profile=profile, limit=args.limit)

        if args.json:
            print(json.dumps(result.to_dict(), indent=2))
            return 0

        self._print_header(f"{len(result.guesses)} Guesses")
        for candidate in result.guesses:
            print(f"  {candidate.password:<30} {candidate.pattern}")
        for phase in result.phases:
            self._print_info(f"{phase['phase']}: {phase['count']} guesses")
        if result.truncated:
            self._print_warning(f"Output limited to {args.limit} guesses")
        return 0

    def _handle_strength_command(self, args) -> int:
        password = args.password or getpass.getpass("Password: ")
        prediction = self._get_engine().predict_strength(password)

        if args.json:
            print(json.dumps(prediction.to_dict(), indent=2))
            return 0

        color = STRENGTH_COLORS.get(prediction.predicted_class, CLIColors.ENDC)
        self._print_header("Strength Prediction")
        print(f"Class: {color}{prediction.predicted_class}{CLIColors.ENDC} "
              f"({prediction.confidence:.1%} confidence)")
        for entry in prediction.to_dict()['classProbabilities']:
            bar = '#' * int(entry['probability'] * 40)
            print(f"  {entry['class']:<10} {entry['probability']:6.1%} {bar}")

        crack_time = prediction.crack_time
        print(f"Brute force time: {format_duration(crack_time.brute_force_seconds)} "
              f"over {crack_time.charset_size} characters")
        print(f"Pattern-aware time: {format_duration(crack_time.adjusted_seconds)}")
        for vulnerability in prediction.vulnerabilities:
            self._print_warning(f"[{vulnerability.severity}] {vulnerability.name}: {vulnerability.detail}")
        return 0

    def _handle_config_command(self, args) -> int:
        """Handle configuration commands"""
        if args.config_command == 'show':
            self._show_configuration()
            return 0
        elif args.config_command == 'validate':
            problems = self.config_manager.validate()
            if problems:
                for problem in problems:
                    self._print_error(problem)
                return 1
            self._print_success("Configuration is valid")
            return 0
        else:
            self._print_error("Unknown config command")
            return 1

    def _show_configuration(self):
        """Show current configuration"""
        path = self.config_manager.config_path
        source = path if path.exists() else f"{path} (not found, using defaults)"
        self._print_info(f"Configuration: {source}")
        for section, values in self.config_manager.settings.to_dict().items():
            print(f"\n{CLIColors.OKBLUE}{section.title()} Settings:{CLIColors.ENDC}")
            for key, value in values.items():
                print(f"  {key}: {value}")

    def _display_attack_result(self, result: AttackResult):
        if result.cracked:
            self._print_success(f"Password found: {result.password} (via {result.method})")
        elif result.status is SessionStatus.CANCELLED:
            self._print_warning(f"Attack {result.reason}")
        else:
            self._print_warning(f"Password not found ({result.reason})")
        print(ResultReporter.render_text(result))

    # Utility methods for colored output
    def _print_header(self, text: str):
        print(f"\n{CLIColors.HEADER}=== {text} ==={CLIColors.ENDC}")

    def _print_success(self, text: str):
        print(f"{CLIColors.OKGREEN}[SUCCESS] {text}{CLIColors.ENDC}")

    def _print_error(self, text: str):
        print(f"{CLIColors.FAIL}[ERROR] {text}{CLIColors.ENDC}")

    def _print_warning(self, text: str):
        print(f"{CLIColors.WARNING}[WARNING] {text}{CLIColors.ENDC}")

    def _print_info(self, text: str):
        print(f"{CLIColors.OKBLUE}[INFO] {text}{CLIColors.ENDC}")


def main():
    """Main entry point for CLI"""
    cli = CrackLabCLI()
    return cli.run()


if __name__ == '__main__':
    import sys
    sys.exit(main())
