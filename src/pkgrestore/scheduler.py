# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run reassembly jobs with a bounded number of concurrent workers."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from . import __version__
from .archive import ArchiveAssembler
from .config import RestoreConfig
from .database import DatabaseReader
from .descriptor import build_descriptor
from .errors import AlreadyExists, PackageNotInstalled, ReassemblyError
from .fileset import FileSetResolver
from .logging import fail, info
from .manager import PackageManager
from .models import JobStatus, ReassemblyJob, ReassemblyResult
from .process import RunnerCallable, run_command
from .workspace import WorkspaceRegistry

TransitionHook = Callable[[str, JobStatus], None]


class JobGate:
    """Counting admission gate limiting how many jobs run at once."""

    def __init__(self, ceiling: int) -> None:
        if ceiling < 1:
            raise ValueError("concurrency ceiling must be at least 1")
        self.ceiling = ceiling
        self._slots = threading.BoundedSemaphore(ceiling)
        self._lock = threading.Lock()
        self._running = 0
        self._peak = 0

    @property
    def running(self) -> int:
        with self._lock:
            return self._running

    @property
    def peak(self) -> int:
        """Highest number of simultaneously admitted jobs observed so far."""

        with self._lock:
            return self._peak

    @contextmanager
    def admit(self) -> Iterator[None]:
        """Block until a slot is free and hold it for the duration of the block."""

        with self._slots:
            with self._lock:
                self._running += 1
                self._peak = max(self._peak, self._running)
            try:
                yield
            finally:
                with self._lock:
                    self._running -= 1


@dataclass(slots=True)
class ReassemblyPipeline:
    """Collaborators needed to turn one package name into an archive."""

    manager: PackageManager
    reader: DatabaseReader
    resolver: FileSetResolver
    assembler: ArchiveAssembler
    use_emoji: bool = True
    use_color: bool | None = None

    @classmethod
    def from_config(
        cls,
        config: RestoreConfig,
        registry: WorkspaceRegistry,
        *,
        runner: RunnerCallable = run_command,
    ) -> ReassemblyPipeline:
        """Build the pipeline described by ``config``."""

        use_color = None if config.output.color else False
        manager = PackageManager(config=config.manager, runner=runner)
        assembler = ArchiveAssembler(
            config.archive,
            registry,
            runner=runner,
            generator=f"Generated by pkgrestore {__version__}",
            use_emoji=config.output.emoji,
            use_color=use_color,
        )
        return cls(
            manager=manager,
            reader=DatabaseReader(config.manager.db_path),
            resolver=FileSetResolver(manager),
            assembler=assembler,
            use_emoji=config.output.emoji,
            use_color=use_color,
        )

    def run(self, job: ReassemblyJob) -> ReassemblyResult:
        """Reassemble ``job.package`` and return its terminal result.

        Every job-scoped error is converted into a ``FAILED`` or ``SKIPPED``
        result so that callers never see an exception for a single package.
        """

        package = job.package
        version: str | None = None
        try:
            version = self.manager.installed_version(package)
            record = self.reader.record(package, version)
            self.assembler.ensure_absent(record, job.destination)
            entry = self.reader.read(package, version)
            descriptor = build_descriptor(entry.desc_text, entry.backup)
            manifest = self.resolver.resolve(package, entry.artifacts)
            outcome = self.assembler.assemble(
                record,
                descriptor,
                entry.artifacts,
                manifest,
                job.destination,
                verbosity=job.verbosity,
            )
        except AlreadyExists as exc:
            info(f"{exc}, skipping", use_emoji=self.use_emoji, use_color=self.use_color)
            return ReassemblyResult(package, JobStatus.SKIPPED, archive=exc.archive, version=version)
        except PackageNotInstalled as exc:
            fail(str(exc), use_emoji=self.use_emoji, use_color=self.use_color)
            return ReassemblyResult(package, JobStatus.FAILED, reason=str(exc), not_installed=True)
        except ReassemblyError as exc:
            fail(str(exc), use_emoji=self.use_emoji, use_color=self.use_color)
            return ReassemblyResult(package, JobStatus.FAILED, reason=str(exc), version=version)
        except OSError as exc:
            reason = f"{package}: {exc}"
            fail(reason, use_emoji=self.use_emoji, use_color=self.use_color)
            return ReassemblyResult(package, JobStatus.FAILED, reason=reason, version=version)
        except Exception as exc:  # noqa: BLE001 - contained to this package
            reason = f"{package}: unexpected {type(exc).__name__}: {exc}"
            fail(reason, use_emoji=self.use_emoji, use_color=self.use_color)
            return ReassemblyResult(package, JobStatus.FAILED, reason=reason, version=version)
        return ReassemblyResult(
            package,
            JobStatus.COMPLETED,
            archive=outcome.archive,
            warning=outcome.warning,
            version=version,
        )


class ReassemblyScheduler:
    """Reassemble many packages with at most ``config.jobs`` running at once."""

    def __init__(
        self,
        config: RestoreConfig | None = None,
        *,
        runner: RunnerCallable = run_command,
        registry: WorkspaceRegistry | None = None,
        on_transition: TransitionHook | None = None,
    ) -> None:
        self.config = config or RestoreConfig()
        self.registry = registry or WorkspaceRegistry(
            prefix=self.config.archive.workspace_prefix,
            parent=self.config.archive.workspace_dir,
        )
        self.gate = JobGate(self.config.jobs)
        self.pipeline = ReassemblyPipeline.from_config(self.config, self.registry, runner=runner)
        self._on_transition = on_transition
        self._status_lock = threading.Lock()
        self._statuses: dict[str, JobStatus] = {}

    @property
    def statuses(self) -> dict[str, JobStatus]:
        with self._status_lock:
            return dict(self._statuses)

    def _transition(self, package: str, status: JobStatus) -> None:
        with self._status_lock:
            self._statuses[package] = status
        if self._on_transition is not None:
            self._on_transition(package, status)

    def _execute(self, job: ReassemblyJob) -> ReassemblyResult:
        with self.gate.admit():
            self._transition(job.package, JobStatus.RUNNING)
            result = self.pipeline.run(job)
            self._transition(job.package, result.status)
        return result

    def run(
        self,
        packages: Sequence[str],
        destination: Path | None = None,
        verbosity: int | None = None,
    ) -> list[ReassemblyResult]:
        """Reassemble ``packages`` and block until every job is terminal.

        Args:
            packages: Package names; duplicates are reassembled once.
            destination: Output directory, defaulting to ``config.destination``.
            verbosity: Diagnostic level, defaulting to ``config.output.verbosity``.

        Returns:
            list[ReassemblyResult]: One result per unique package, in request order.
        """

        target = destination if destination is not None else self.config.destination
        level = verbosity if verbosity is not None else self.config.output.verbosity
        jobs = [ReassemblyJob(package=name, destination=target, verbosity=level) for name in dict.fromkeys(packages)]
        for job in jobs:
            self._transition(job.package, JobStatus.QUEUED)

        results: dict[str, ReassemblyResult] = {}
        with ThreadPoolExecutor(max_workers=self.gate.ceiling, thread_name_prefix="pkgrestore") as executor:
            future_map = {executor.submit(self._execute, job): job for job in jobs}
            for future in as_completed(future_map):
                job = future_map[future]
                results[job.package] = future.result()
        return [results[job.package] for job in jobs]

    def cancel(self) -> list[Path]:
        """Remove every workspace this scheduler created and return them."""

        return self.registry.sweep()


def reassemble(
    package: str,
    destination: Path,
    verbosity: int = 0,
    *,
    config: RestoreConfig | None = None,
    runner: RunnerCallable = run_command,
    registry: WorkspaceRegistry | None = None,
) -> ReassemblyResult:
    """Reassemble a single package into ``destination``."""

    cfg = config or RestoreConfig()
    registry = registry or WorkspaceRegistry(
        prefix=cfg.archive.workspace_prefix,
        parent=cfg.archive.workspace_dir,
    )
    pipeline = ReassemblyPipeline.from_config(cfg, registry, runner=runner)
    return pipeline.run(ReassemblyJob(package=package, destination=destination, verbosity=verbosity))


def reassemble_all(
    packages: Sequence[str],
    destination: Path,
    verbosity: int = 0,
    ceiling: int = 1,
    *,
    config: RestoreConfig | None = None,
    runner: RunnerCallable = run_command,
    on_transition: TransitionHook | None = None,
) -> list[ReassemblyResult]:
    """Reassemble ``packages`` with at most ``ceiling`` jobs running at once."""

    cfg = (config or RestoreConfig()).model_copy(update={"jobs": ceiling})
    scheduler = ReassemblyScheduler(cfg, runner=runner, on_transition=on_transition)
    return scheduler.run(packages, destination, verbosity)


__all__ = [
    "JobGate",
    "ReassemblyPipeline",
    "ReassemblyScheduler",
    "reassemble",
    "reassemble_all",
]
