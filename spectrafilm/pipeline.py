"""
Frame series pipeline: reduces an ordered batch of frames and renders the barcodes.
Frames may be reduced concurrently but results always come back in input order.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .analysis.colors import Color
from .analysis.reducer import FrameColorProfile, FrameReducer
from .config import BarcodeConfig, ReductionConfig, SpectraFilmConfig, get_config
from .errors import DecodeFailure, InvalidConfiguration
from .io.frames import FrameSource, list_frame_files, load_frame
from .visualization.barcode import BarcodeComposer


@dataclass(frozen=True)
class FrameSeries:
    """Ordered frame profiles for one video."""
    profiles: Tuple[FrameColorProfile, ...]

    def __len__(self) -> int:
        return len(self.profiles)

    def __iter__(self):
        return iter(self.profiles)

    def averages(self) -> List[Color]:
        return [p.average for p in self.profiles]

    def medians(self) -> List[Color]:
        return [p.median for p in self.profiles]

    def dominants(self) -> List[Tuple[Color, ...]]:
        return [p.dominant for p in self.profiles]

    def to_records(self) -> List[Dict]:
        """Per-frame summary records, ready for an external JSON writer."""
        return [p.to_dict() for p in self.profiles]


def _identify(index: int, source) -> Tuple[str, FrameSource]:
    if isinstance(source, tuple):
        if len(source) != 2:
            raise DecodeFailure(f"Unsupported frame source: tuple of length {len(source)}")
        identifier, source = source
        return str(identifier), source
    if isinstance(source, (str, Path)):
        return str(source), source
    return f"frame_{index:06d}", source


class FrameSeriesPipeline:
    """Reduce a frame series and compose its barcode images."""

    def __init__(self, reduction: ReductionConfig = None, barcode: BarcodeConfig = None,
                 max_workers: int = 4, output_files: Optional[Dict[str, str]] = None,
                 verbose: bool = False):
        if max_workers < 1:
            raise InvalidConfiguration(f"max_workers must be >= 1, got {max_workers}")

        self.reduction = reduction or ReductionConfig()
        self.reducer = FrameReducer(self.reduction)
        self.composer = BarcodeComposer(barcode, verbose=verbose)
        self.max_workers = max_workers
        self.output_files = output_files or {
            'average': 'avg.png',
            'median': 'med.png',
            'dominant': 'mode_{count}.png',
        }
        self.verbose = verbose

    @classmethod
    def from_config(cls, config: SpectraFilmConfig = None) -> 'FrameSeriesPipeline':
        """Build a pipeline from the YAML configuration."""
        config = config or get_config()
        return cls(
            reduction=config.reduction(),
            barcode=config.barcode(),
            max_workers=config.max_workers,
            output_files=config.output_files,
            verbose=config.verbose,
        )

    def _reduce_one(self, item: Tuple[str, FrameSource]) -> FrameColorProfile:
        identifier, source = item
        return self.reducer.reduce(load_frame(source), identifier)

    def _report(self, profile: FrameColorProfile):
        print(f"{profile.source} > ")
        if profile.average is not None:
            print(f"  Average: {profile.average.hex}")
        if profile.median is not None:
            print(f"  Median: {profile.median.hex}")
        if self.reduction.dominant:
            shown = ", ".join(c.hex for c in profile.dominant[:5])
            print(f"  Mode: {shown}, ...")

    def reduce_series(self, sources: Iterable[Union[FrameSource, Tuple[str, FrameSource]]]) -> FrameSeries:
        """Reduce every frame, preserving input order.

        The first decode or reduction failure aborts the whole series.
        """
        items = [_identify(i, source) for i, source in enumerate(sources)]

        if self.verbose:
            print(f"Generating color data for {len(items)} frames...")

        if self.max_workers == 1 or len(items) <= 1:
            profiles = [self._reduce_one(item) for item in items]
        else:
            executor = ThreadPoolExecutor(max_workers=self.max_workers)
            try:
                # map yields in submission order and re-raises the first failure
                profiles = list(executor.map(self._reduce_one, items))
            except BaseException:
                executor.shutdown(wait=True, cancel_futures=True)
                raise
            executor.shutdown(wait=True)

        if self.verbose:
            for profile in profiles:
                self._report(profile)

        return FrameSeries(tuple(profiles))

    def reduce_directory(self, frame_dir: Union[str, Path]) -> FrameSeries:
        """Reduce the frame images of a directory in file-name order."""
        files = list_frame_files(frame_dir)
        return self.reduce_series((f"frames/{path.name}", path) for path in files)

    def render_barcodes(self, series: FrameSeries, output_dir: Union[str, Path]) -> Dict[str, str]:
        """Write one barcode per enabled metric into an existing directory."""
        output_dir = Path(output_dir)
        written = {}

        if self.reduction.average:
            path = output_dir / self.output_files['average']
            written['average'] = self.composer.write_line_image(series.averages(), path)

        if self.reduction.median:
            path = output_dir / self.output_files['median']
            written['median'] = self.composer.write_line_image(series.medians(), path)

        if self.reduction.dominant:
            name = self.output_files['dominant'].format(count=self.reduction.dominant_count)
            written['dominant'] = self.composer.write_column_image(series.dominants(), output_dir / name)

        return written

    def run(self, sources: Sequence[Union[FrameSource, Tuple[str, FrameSource]]],
            output_dir: Union[str, Path]) -> FrameSeries:
        """Reduce all frames then render every enabled barcode."""
        series = self.reduce_series(sources)
        self.render_barcodes(series, output_dir)
        return series
