"""Streaming GPX writer.

The document is appended to a text stream as the vehicle drives:

* the header (and, in single-track mode, one ``<trk><trkseg>``) on :meth:`TrackWriter.open`;
* ``<trk><trkseg>`` / ``</trkseg></trk>`` around every drive otherwise;
* one ``<trkpt>`` per position;
* the footer on :meth:`TrackWriter.close`, after closing any open segment.

Every record goes out as a single ``write()`` followed by ``flush()`` so a
reader tailing the stream never sees half a track-point.
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime
from typing import TextIO
from xml.sax.saxutils import quoteattr

from teslagps._constants import GPX_CREATOR, GPX_NAMESPACE
from teslagps.exceptions import TeslaGpsError
from teslagps.models.drive_state import DriveState

_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
_OPEN_SEGMENT = "<trk>\n<trkseg>\n"
_CLOSE_SEGMENT = "</trkseg>\n</trk>\n"
_FOOTER = "</gpx>\n"


def format_gps_time(moment: datetime) -> str:
    """Render an aware datetime as an RFC 3339 UTC timestamp (``1970-01-01T00:01:40Z``)."""
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_coordinate(value: float) -> str:
    return repr(float(value))


class TrackWriter:
    """Append-only GPX emitter owning the track-segment state."""

    def __init__(self, stream: TextIO, *, single_track: bool = False, creator: str = GPX_CREATOR) -> None:
        self._stream = stream
        self._single_track = single_track
        self._creator = creator
        self._lock = threading.Lock()
        self._opened = False
        self._closed = False
        self._segment_open = False
        self.points_written = 0

    def __enter__(self) -> TrackWriter:
        self.open()
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def single_track(self) -> bool:
        return self._single_track

    @property
    def segment_open(self) -> bool:
        return self._segment_open

    def _emit(self, text: str) -> None:
        self._stream.write(text)
        self._stream.flush()

    def open(self) -> None:
        """Write the document header."""
        with self._lock:
            if self._opened:
                raise TeslaGpsError("GPX document already opened")
            self._opened = True
            header = (
                _XML_DECLARATION
                + f'<gpx version="1.1" creator={quoteattr(self._creator)} xmlns="{GPX_NAMESPACE}">\n'
            )
            if self._single_track:
                header += _OPEN_SEGMENT
                self._segment_open = True
            self._emit(header)

    def open_segment(self) -> bool:
        """Start a track segment. Returns ``False`` if one is already open."""
        with self._lock:
            self._require_writable()
            if self._segment_open:
                return False
            self._emit(_OPEN_SEGMENT)
            self._segment_open = True
            return True

    def close_segment(self) -> bool:
        """End the current track segment. Returns ``False`` if none is open."""
        with self._lock:
            self._require_writable()
            if not self._segment_open:
                return False
            self._emit(_CLOSE_SEGMENT)
            self._segment_open = False
            return True

    def write_point(self, drive_state: DriveState) -> None:
        """Append one ``<trkpt>`` for *drive_state*."""
        latitude, longitude, gps_time = drive_state.latitude, drive_state.longitude, drive_state.gps_time
        if latitude is None or longitude is None or gps_time is None:
            raise TeslaGpsError("drive state has no position to write")
        record = (
            f'<trkpt lat="{format_coordinate(latitude)}" lon="{format_coordinate(longitude)}">\n'
            f"<time>{format_gps_time(gps_time)}</time>\n"
            "</trkpt>\n"
        )
        with self._lock:
            self._require_writable()
            if not self._segment_open:
                raise TeslaGpsError("track point written outside a track segment")
            self._emit(record)
            self.points_written += 1

    def close(self) -> None:
        """Close any open segment and write the footer. Safe to call more than once."""
        with self._lock:
            if self._closed or not self._opened:
                return
            self._closed = True
            footer = _FOOTER
            if self._segment_open:
                footer = _CLOSE_SEGMENT + footer
                self._segment_open = False
            self._emit(footer)

    def _require_writable(self) -> None:
        if not self._opened:
            raise TeslaGpsError("GPX document not opened")
        if self._closed:
            raise TeslaGpsError("GPX document already closed")
