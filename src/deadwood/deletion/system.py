"""Safe deletion orchestration.

    ANALYZE -> PREVIEW
            -> BACKUP -> for each batch: MUTATE -> VALIDATE -> COMMIT | ROLLBACK

Preview is the default and never touches the filesystem. On execute every
file any candidate lives in is backed up before the first write; each
batch is then applied, validated and either committed or rolled back on
its own, so one failing batch never undoes another.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union

from ..config import DeletionOptions
from ..context import RunContext
from ..exceptions import BackupError, DeadwoodError, FileSystemError, StaleFileError
from ..graph.models import CallEdge, FunctionInfo
from ..logging_config import get_logger
from ..typesafety import TypeStore
from .backup import Backup, atomic_write_bytes, read_bytes
from .candidates import DeletionCandidateGenerator
from .deleter import LineRange, ranges_by_file, remove_line_ranges
from .models import BatchOutcome, DeletionCandidate, SafeDeletionResult, ValidationRecord
from .validation import NullValidator, ValidationPort, run_validation

logger = get_logger(__name__)


class SafeDeletionSystem:
    """Find dead functions and, when asked to, remove them safely.

    Args:
        store: Type storage port used to protect type-contract methods
        validator: Type check / test runner; defaults to one that never runs
        options: Deletion options (validated on construction)
        root: Directory relative file paths and ``backup_dir`` resolve against
        context: Run context; a fresh one is created when omitted
    """

    def __init__(
        self,
        store: Optional[TypeStore] = None,
        validator: Optional[ValidationPort] = None,
        options: Optional[DeletionOptions] = None,
        root: Optional[Union[str, Path]] = None,
        context: Optional[RunContext] = None,
    ):
        self.store = store
        self.validator = validator or NullValidator()
        self.options = options or DeletionOptions()
        self.root = Path(root) if root is not None else Path.cwd()
        self.context = context or RunContext()

    def resolve(self, file_path: Union[str, Path]) -> Path:
        path = Path(file_path)
        if not path.is_absolute():
            path = self.root / path
        return path.resolve()

    def run(
        self,
        functions: Iterable[FunctionInfo],
        edges: Iterable[CallEdge],
        snapshot_id: str = "",
    ) -> SafeDeletionResult:
        options = self.options
        generator = DeletionCandidateGenerator(options, self.store, self.context)
        candidates = generator.generate(functions, edges, snapshot_id or self.context.snapshot_id)

        result = SafeDeletionResult(
            candidate_functions=candidates,
            protected_functions=list(generator.protected),
            warnings=list(generator.warnings),
            preview=options.is_preview,
        )
        if options.is_preview:
            logger.info(f"Preview: {len(candidates)} function(s) would be deleted")
            return result

        pending: list[DeletionCandidate] = []
        for candidate in candidates:
            if self.resolve(candidate.function_info.file_path).is_file():
                pending.append(candidate)
            else:
                result.skipped_functions.append(candidate)
                result.warnings.append(
                    f"Skipping {candidate.function_info.name}: "
                    f"{candidate.function_info.file_path} does not exist"
                )
        if not pending:
            logger.info("Nothing to delete")
            return result

        backup_root = Path(options.backup_dir)
        if not backup_root.is_absolute():
            backup_root = self.root / backup_root
        try:
            backup = Backup.create(
                ranges_by_file((c.function_info for c in pending), self.resolve), backup_root
            )
        except FileSystemError as e:
            logger.error(f"Backup failed, no file was modified: {e}")
            result.errors.append(f"Backup failed: {e}")
            result.skipped_functions.extend(pending)
            return result
        result.backup_path = str(backup.path)

        baseline = run_validation(self.validator)
        result.pre_delete_validation = baseline

        self._run_batches(pending, backup, baseline, result)

        logger.info(
            f"Deleted {len(result.deleted_functions)} function(s), "
            f"skipped {len(result.skipped_functions)}; backup kept at {backup.path}"
        )
        return result

    def restore_from_backup(self, backup_path: Union[str, Path], force: bool = False) -> list[str]:
        """Restore every file captured in ``backup_path`` to its exact original bytes."""
        return Backup.open(backup_path).restore(force=force)

    # ── batches ───────────────────────────────────────────────────────

    def _run_batches(
        self,
        pending: list[DeletionCandidate],
        backup: Backup,
        baseline: ValidationRecord,
        result: SafeDeletionResult,
    ) -> None:
        size = self.options.max_functions_per_batch
        batches = [pending[i : i + size] for i in range(0, len(pending), size)]
        # Ranges already deleted and committed, per resolved file path
        committed: dict[str, list[LineRange]] = {}

        for index, batch in enumerate(batches):
            outcome = BatchOutcome(index=index, function_ids=[c.function_id for c in batch])
            result.batches.append(outcome)
            logger.info(f"Batch {index + 1}/{len(batches)}: deleting {len(batch)} function(s)")
            touched = ranges_by_file((c.function_info for c in batch), self.resolve)

            written: list[str] = []
            try:
                for path, ranges in sorted(touched.items()):
                    self._apply(backup, path, committed.get(path, []), ranges)
                    written.append(path)
            except (FileSystemError, BackupError) as e:
                outcome.error = str(e)
                result.errors.append(f"Batch {index + 1} failed: {e}")
                logger.warning(f"Batch {index + 1} failed, rolling back: {e}")
                if not self._rollback(backup, written, committed, result):
                    self._abandon(batches[index:], result)
                    return
                result.skipped_functions.extend(batch)
                continue

            validation = run_validation(self.validator)
            outcome.validation = validation
            result.post_delete_validation = validation

            regressions = validation.regressed_from(baseline)
            if regressions:
                message = (
                    f"Batch {index + 1} rolled back: {' and '.join(regressions)} failed "
                    f"after deleting {', '.join(c.function_info.name for c in batch)}"
                )
                logger.warning(message)
                result.warnings.append(message)
                if not self._rollback(backup, list(touched), committed, result):
                    self._abandon(batches[index:], result)
                    return
                result.skipped_functions.extend(batch)
                continue

            for path, ranges in touched.items():
                committed.setdefault(path, []).extend(ranges)
            outcome.committed = True
            result.deleted_functions.extend(batch)

    @staticmethod
    def _apply(
        backup: Backup, path: str, committed: list[LineRange], ranges: list[LineRange]
    ) -> None:
        original = backup.original_bytes(path)
        if read_bytes(path) != remove_line_ranges(original, committed, path):
            raise StaleFileError(path)
        atomic_write_bytes(path, remove_line_ranges(original, committed + ranges, path))

    @staticmethod
    def _rollback(
        backup: Backup,
        paths: list[str],
        committed: dict[str, list[LineRange]],
        result: SafeDeletionResult,
    ) -> bool:
        """Put ``paths`` back to their state after the last committed batch."""
        try:
            for path in paths:
                original = backup.original_bytes(path)
                restored = remove_line_ranges(original, committed.get(path, []), path)
                atomic_write_bytes(path, restored)
        except DeadwoodError as e:
            message = f"Rollback failed ({e}); restore manually from {backup.path}"
            logger.error(message)
            result.errors.append(message)
            return False
        return True

    @staticmethod
    def _abandon(batches: list[list[DeletionCandidate]], result: SafeDeletionResult) -> None:
        for batch in batches:
            result.skipped_functions.extend(batch)
