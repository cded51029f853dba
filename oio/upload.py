"""
Multipart upload of a file buffer to pre-signed part URLs.

Flow (the init/complete calls live in api/items.py):
  1. POST /shorts/file/init      → UploadPlan (part URLs + part size)
  2. PUT  <part url> × N         → one ETag per part   (this module)
  3. POST /shorts/file/complete  → parts sorted by part number

Parts go out in batches of at most MAX_CONCURRENT_UPLOADS. Batches run
strictly one after another; inside a batch the uploads run in parallel,
each started 100ms × its position later than the first. A part is tried
up to MAX_ATTEMPTS times with linear backoff. Any part that runs out of
attempts fails the whole upload — no partial results, no resume.

A failed upload raises at once without waiting for the rest of its batch.
A sibling part already in flight keeps retrying on its worker thread until
it succeeds or runs out of attempts, and the process does not exit before
that thread ends (concurrent.futures joins its workers at shutdown).
"""

import logging
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait

import requests

from oio.errors import ApiError, TransportError, UploadPartFailed

logger = logging.getLogger(__name__)

MAX_CONCURRENT_UPLOADS = 2
MAX_ATTEMPTS = 8
RETRY_DELAY_SECS = 2.0
# Multiplier on RETRY_DELAY_SECS after a reset / broken pipe / timeout.
CONNECTION_ERROR_BACKOFF = 3
STAGGER_SECS = 0.1
PART_TIMEOUT_SECS = 300


class PresignedPart:
    def __init__(self, part_number: int, url: str):
        self.part_number = part_number
        self.url = url

    def __repr__(self):
        return f'PresignedPart({self.part_number})'


class UploadPlan:
    """Server-issued split of one object: part URLs in order plus the part size."""

    def __init__(self, parts, part_size: int, total_size: int):
        self.parts = list(parts)
        self.part_size = part_size
        self.total_size = total_size

    @classmethod
    def from_init_response(cls, data: dict, total_size: int) -> 'UploadPlan':
        parts = [
            PresignedPart(int(p['partNumber']), p['url'])
            for p in data.get('presignedUrls') or []
        ]
        return cls(parts, int(data.get('partSize') or 0), total_size)

    def byte_range(self, part_number: int, size: int | None = None) -> tuple[int, int]:
        """[start, end) of a 1-based part, clipped to `size` (default: the object size)."""
        size = self.total_size if size is None else size
        start = (part_number - 1) * self.part_size
        end = min(part_number * self.part_size, size)
        return start, end


class CompletedPart:
    def __init__(self, part_number: int, etag: str):
        self.part_number = part_number
        self.etag = etag

    def to_dict(self) -> dict:
        return {'partNumber': self.part_number, 'etag': self.etag}

    def __eq__(self, other):
        if not isinstance(other, CompletedPart):
            return NotImplemented
        return (self.part_number, self.etag) == (other.part_number, other.etag)

    def __repr__(self):
        return f'CompletedPart({self.part_number}, {self.etag!r})'


class MultipartUploader:
    """
    Uploads the parts of an UploadPlan.

    `http` is anything with a requests-style put(); defaults to the requests
    module itself. The tuning knobs default to the module constants.
    """

    def __init__(self, http=None, max_concurrent=MAX_CONCURRENT_UPLOADS,
                 max_attempts=MAX_ATTEMPTS, retry_delay=RETRY_DELAY_SECS,
                 stagger=STAGGER_SECS, part_timeout=PART_TIMEOUT_SECS):
        self.http = http or requests
        self.max_concurrent = max_concurrent
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.stagger = stagger
        self.part_timeout = part_timeout

    def upload(self, plan: UploadPlan, data: bytes, on_progress=None) -> list[CompletedPart]:
        """
        Upload every part of `plan` from `data`.

        on_progress(parts_done, parts_total, bytes_done, bytes_total) runs on
        the calling thread after each part finishes.

        Returns the completed parts sorted by part number.
        Raises UploadPartFailed for the first part that exhausts its attempts.
        """
        total_parts = len(plan.parts)
        total_bytes = len(data)
        completed = []
        completed_bytes = 0

        for i in range(0, total_parts, self.max_concurrent):
            batch = plan.parts[i:i + self.max_concurrent]
            pool = ThreadPoolExecutor(max_workers=len(batch), thread_name_prefix='oio-part')
            try:
                pending = set()
                for idx, part in enumerate(batch):
                    start, end = plan.byte_range(part.part_number, total_bytes)
                    chunk = data[start:end]
                    pending.add(pool.submit(self._run_part, part, chunk, idx * self.stagger))

                while pending:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    for fut in done:
                        result, size = fut.result()
                        completed.append(result)
                        completed_bytes += size
                        if on_progress:
                            on_progress(len(completed), total_parts, completed_bytes, total_bytes)
            finally:
                # On failure, don't wait for the sibling still in flight.
                pool.shutdown(wait=False, cancel_futures=True)

        completed.sort(key=lambda p: p.part_number)
        return completed

    def _run_part(self, part, chunk, delay):
        if delay:
            time.sleep(delay)
        etag = self.upload_part(part.url, chunk, part.part_number)
        return CompletedPart(part.part_number, etag), len(chunk)

    def upload_part(self, url, chunk: bytes, part_number: int) -> str:
        """PUT one part with retries. Returns its ETag."""
        last_error = None

        for attempt in range(self.max_attempts):
            delay = self.retry_delay
            try:
                res = self.http.put(
                    url,
                    data=chunk,
                    headers={'Content-Length': str(len(chunk))},
                    timeout=self.part_timeout,
                )
            except requests.RequestException as e:
                last_error = TransportError.from_exception(e, url)
                if last_error.is_connection_error:
                    delay *= CONNECTION_ERROR_BACKOFF
            else:
                etag = res.headers.get('ETag') if res.status_code == 200 else None
                if etag:
                    return etag
                if res.status_code != 200:
                    last_error = ApiError(
                        f'upload failed with status {res.status_code}: {res.text[:200]}',
                        status_code=res.status_code,
                    )
                else:
                    last_error = ApiError('no ETag in response headers', status_code=200)

            if attempt < self.max_attempts - 1:
                wait_secs = delay * (attempt + 1)
                logger.warning(
                    'Part %d attempt %d/%d failed (%s); retrying in %.1fs',
                    part_number, attempt + 1, self.max_attempts, last_error, wait_secs,
                )
                time.sleep(wait_secs)

        raise UploadPartFailed(part_number, self.max_attempts, last_error)


def upload_parts(plan: UploadPlan, data: bytes, on_progress=None, **kwargs) -> list[CompletedPart]:
    """Module-level shorthand for MultipartUploader(**kwargs).upload(...)."""
    return MultipartUploader(**kwargs).upload(plan, data, on_progress)


def get_mime_type(path) -> str:
    """Content type from the extension, without any charset suffix."""
    import mimetypes

    mime, _ = mimetypes.guess_type(str(path))
    if not mime:
        return 'application/octet-stream'
    return mime.split(';', 1)[0].strip()
