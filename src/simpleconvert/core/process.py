"""Asynchronous execution of external tools.

Every process started here is killed and reaped if the awaiting task is
cancelled or times out, so cancelling a conversion never leaves ffmpeg or x265
running in the background.
"""

import asyncio
import os
import subprocess
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from loguru import logger


@dataclass(frozen=True)
class ProcessResult:
    """Exit status and captured output of a finished process."""
    cmd: List[str]
    returncode: int
    stdout: str
    stderr: str


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    """Kill a process if it is still running and wait for it."""
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()


async def _read_lines(stream: asyncio.StreamReader,
                      callback: Optional[Callable[[str], None]]) -> str:
    """Read a stream line by line, handing each line to ``callback``."""
    chunks = []
    while True:
        line = await stream.readline()
        if not line:
            break
        text = line.decode(errors="replace")
        chunks.append(text)
        if callback is not None:
            callback(text.rstrip("\r\n"))
    return "".join(chunks)


async def _read_all(stream: Optional[asyncio.StreamReader]) -> str:
    if stream is None:
        return ""
    return (await stream.read()).decode(errors="replace")


def _check(result: ProcessResult) -> ProcessResult:
    if result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode, result.cmd, result.stdout, result.stderr
        )
    return result


async def run_command(cmd: Sequence[str], *, timeout: Optional[float] = None,
                      on_stdout_line: Optional[Callable[[str], None]] = None,
                      check: bool = True) -> ProcessResult:
    """Run a command and capture its output.

    Args:
        cmd: Command and arguments to run
        timeout: Optional timeout in seconds
        on_stdout_line: Optional callback receiving stdout line by line
        check: Raise if the command exits non-zero

    Returns:
        Result of the finished process

    Raises:
        subprocess.CalledProcessError: If command fails and ``check`` is set
        asyncio.TimeoutError: If the timeout expires (the process is killed)
        OSError: If the command cannot be started
    """
    cmd = [str(part) for part in cmd]
    logger.debug(f"Running command: {' '.join(cmd)}")
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE
    )
    try:
        stdout, stderr = await asyncio.wait_for(
            asyncio.gather(
                _read_lines(proc.stdout, on_stdout_line),
                _read_all(proc.stderr),
            ),
            timeout
        )
        await proc.wait()
    except BaseException:
        await _terminate(proc)
        raise

    result = ProcessResult(cmd, proc.returncode, stdout, stderr)
    return _check(result) if check else result


async def run_piped(producer_cmd: Sequence[str], consumer_cmd: Sequence[str], *,
                    timeout: Optional[float] = None,
                    check: bool = True) -> Tuple[ProcessResult, ProcessResult]:
    """Run two commands with the producer's stdout piped into the consumer.

    Both processes are awaited. The producer is checked first, so a failing
    producer fails the pipeline even when the consumer exited cleanly on a
    truncated stream.

    Args:
        producer_cmd: Command writing to stdout
        consumer_cmd: Command reading from stdin
        timeout: Optional timeout in seconds for the whole pipeline
        check: Raise if either command exits non-zero

    Returns:
        Producer and consumer results

    Raises:
        subprocess.CalledProcessError: If a command fails and ``check`` is set
        asyncio.TimeoutError: If the timeout expires (both processes are killed)
        OSError: If a command cannot be started
    """
    producer_cmd = [str(part) for part in producer_cmd]
    consumer_cmd = [str(part) for part in consumer_cmd]
    logger.debug(f"Running pipeline: {' '.join(producer_cmd)} | {' '.join(consumer_cmd)}")

    read_fd, write_fd = os.pipe()
    procs = []
    try:
        try:
            producer = await asyncio.create_subprocess_exec(
                *producer_cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=write_fd,
                stderr=asyncio.subprocess.PIPE
            )
            procs.append(producer)
            consumer = await asyncio.create_subprocess_exec(
                *consumer_cmd,
                stdin=read_fd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
            procs.append(consumer)
        finally:
            # The children hold their own copies; the consumer only sees EOF
            # once every write end is closed.
            os.close(read_fd)
            os.close(write_fd)

        (_, producer_err), (consumer_out, consumer_err) = await asyncio.wait_for(
            asyncio.gather(producer.communicate(), consumer.communicate()),
            timeout
        )
    except BaseException:
        for proc in procs:
            await _terminate(proc)
        raise

    producer_result = ProcessResult(
        producer_cmd, producer.returncode, "", producer_err.decode(errors="replace")
    )
    consumer_result = ProcessResult(
        consumer_cmd, consumer.returncode,
        consumer_out.decode(errors="replace"), consumer_err.decode(errors="replace")
    )
    if check:
        _check(producer_result)
        _check(consumer_result)
    return producer_result, consumer_result
