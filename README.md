# medialine

Pull-based building blocks for moving raw media through a pipeline, in pure
Python with no third-party dependencies.

A reader is any object with a `read()` method that returns `(data, release)`.
`release` may be called once the data is no longer needed; calling it is
optional. A failed read raises instead of returning. A transform is any
callable that takes a reader and returns a new one.

## What it provides

- **Constraints** (`medialine.constraints`): ideal, exact, one-of and ranged
  constraints for integers (`Int`, `IntExact`, `IntOneOf`, `IntRanged`),
  floats, durations (`timedelta`), strings, frame formats and booleans
  (`Bool`, `BoolExact`). Each has `compare(actual)`, returning
  `(distance, satisfied)`, and `preferred()`, returning the value it would
  pick by itself or `None`. In the ranged constraints a bound or ideal of
  `None` or zero counts as unspecified.
- **Media descriptions** (`medialine.media`): `Media` (with `Video` and
  `Audio` parts) and `MediaConstraints` (with `VideoConstraints` and
  `AudioConstraints`). `MediaConstraints.fitness_distance(media)` sums the
  distances of all set constraints and reports whether every one is
  satisfied; the frame rate is only compared when the media reports one.
  `Media.merge(other)` copies every non-zero property (booleans always), and
  `Media.merge_constraints(constraints)` sets each property whose constraint
  has a preferred value.
- **Broadcasting** (`medialine.broadcast`): `Broadcaster` fans one source out
  to any number of readers through a small ring buffer (32 entries by
  default, see `BroadcasterConfig`). Readers come and go freely; only one
  reader pulls from the source at a time and the others share its result,
  including any exception it raised. Slow readers skip what has left the
  buffer. `replace_source` swaps the source while readers are running.
  Also here: `Reader`, `ReaderFunc`, `ReleaseHandle` and
  `InsufficientBufferError`.
- **Audio streams** (`medialine.audio.stream`): an audio `Broadcaster` whose
  `new_reader(copy_chunk)` can give each reader its own deep copy of a chunk,
  `merge` to chain transforms, and `detect_changes(interval, on_change)` to
  report channel count, sample rate and latency changes. A chunk is any
  object whose `chunk_info()` has `len`, `channels` and `sampling_rate`.
- **Video images** (`medialine.video.image`): packed images (`Alpha`,
  `Alpha16`, `CMYK`, `Gray`, `Gray16`, `NRGBA`, `NRGBA64`, `RGBA`, `RGBA64`)
  and planar `YCbCr` / `NYCbCrA` with all standard chroma subsamplings
  (`SubsampleRatio`), `Rectangle`, the constructors `new_rgba`, `new_gray`
  and `new_ycbcr`, and `rgb_to_ycbcr` / `ycbcr_to_rgb`.
- **Video conversion** (`medialine.video.convert`): `image_to_ycbcr`,
  `image_to_rgba`, `i444_to_i420`, `i422_to_i420`, and the reader transforms
  `to_i420` (raises `ValueError` for subsampling it cannot convert) and
  `to_rgba`.
- **Video streams** (`medialine.video.stream`): a video `Broadcaster` whose
  `new_reader(copy_frame)` can copy frames through a `FrameBuffer`, and
  `merge` to chain transforms.
- **Scaling** (`medialine.video.scale`): `scale(width, height, scaler)` for
  `RGBA` and `YCbCr` frames with nearest-neighbour sampling
  (`Scaler.NEAREST_NEIGHBOR`, the only algorithm). A non-positive width or
  height keeps the aspect ratio; both non-positive raises `ValueError`, and
  other image types raise `TypeError` on read.
- **Timing transforms** (`medialine.video.transforms`): `throttle(rate)`
  drops frames to deliver at most `rate` per second, and
  `detect_changes(interval, fps_diff_tolerance, on_change)` reports frame
  size changes and frame rate changes measured over `interval`.
- **Frame copies** (`medialine.video.framebuffer`): `FrameBuffer.store_copy`
  keeps a private copy of an image, reusing its memory when the next image
  has the same layout; `load` returns it. Unknown image types are stored as
  `RGBA`.

## Examples

Matching a media description against constraints:

```python
from medialine.constraints import Float, IntExact
from medialine.media import Media, MediaConstraints, Video, VideoConstraints

wanted = MediaConstraints(video=VideoConstraints(width=IntExact(1280), frame_rate=Float(30.0)))
camera = Media(video=Video(width=1280, height=720, frame_rate=60.0))

distance, ok = wanted.fitness_distance(camera)
print(ok, distance)   # True 0.5
```

Broadcasting a source to several readers:

```python
from medialine.broadcast import Broadcaster, ReaderFunc, ReleaseHandle

items = iter(range(100))
source = ReaderFunc(lambda: (next(items), ReleaseHandle()))

broadcaster = Broadcaster(source)
first = broadcaster.new_reader(None)
second = broadcaster.new_reader(None)

a, _ = first.read()
b, _ = second.read()
print(a, b)   # 0 0 - the second reader shares what the first one pulled
```

Chaining video transforms:

```python
from medialine.broadcast import ReaderFunc, ReleaseHandle
from medialine.video.convert import to_i420
from medialine.video.image import Rectangle, new_rgba
from medialine.video.scale import scale
from medialine.video.stream import merge

frame = new_rgba(Rectangle(0, 0, 640, 480))
source = ReaderFunc(lambda: (frame, ReleaseHandle()))

reader = merge(scale(320, -1), to_i420)(source)
img, _ = reader.read()
print(img.rect.dx(), img.rect.dy(), img.subsample_ratio)   # 320 240 YCbCrSubsampleRatio420
```

## What it does not do

It does not open cameras, microphones or screens, and it has no encoders or
decoders: sources are whatever readers you supply. There is no audio
buffering or channel-mixing transform, and only one scaling algorithm.
All pixel work is plain Python, so large frames convert slowly.

## Running the tests

```
pip install -e .[test]
pytest
```