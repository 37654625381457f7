# vcmiextract

Extracts the contents of Heroes of Might and Magic III game archives into
ordinary files, converting images to PNG along the way. Only the standard
library is used: PNG encoding and zlib inflation are done with `zlib`.

## Supported inputs

| Extension      | What is written                                                              |
|----------------|------------------------------------------------------------------------------|
| `.lod`, `.pac` | Every member; compressed members are inflated. `.pcx` / `.p32` members that decode as images are saved as `.png`, everything else as-is |
| `.snd`         | Every sound, named `<entry>.wav`                                             |
| `.vid`         | Every video, as-is; each runs up to the start of the next one                |
| `.def`, `.d32` | One PNG per frame plus an `animation.json` listing the frames                |
| `.pak`         | The first DXT1/DXT5 sheet of each entry, as `<entry>.png`                    |

Images with an alpha channel that is fully opaque are written as RGB PNGs.

## Installation

```
pip install .
```

## Usage

```
vcmiextract H3bitmap.lod H3sprite.lod Heroes3.snd
```

The same command is available as `python -m vcmiextract.cli`.

Each argument is extracted into a directory next to it, named after the file
without its extension (`H3bitmap.lod` goes to `H3bitmap/`). A file that does
not exist, or whose output path is an existing regular file, is reported and
skipped; a file with an unrecognised extension is reported and left alone.
Archives are read into memory whole. Malformed data stops the run with an
exception (`TruncatedDataError`, `DecompressionError`, `DdsFormatError`,
`DefFormatError` or another `ValueError`).

For 8-bit `.def` animations the frames are saved as `0.png`, `1.png`, ...
numbered within their group; `animation.json` records each frame's group
(when there is more than one), its number and its stored name with a `.png`
extension. 32-bit `.d32` frames are saved under their stored names.

## Library use

```python
from vcmiextract.cli import extract_file
from vcmiextract.reader import MemoryReader
from vcmiextract.pcx import load_image_pcx
from vcmiextract.image import optimize_and_save

extract_file("H3bitmap.lod", "out")

image = load_image_pcx(MemoryReader.from_path("picture.pcx"))
optimize_and_save(image, "picture.png")
```

Building blocks:

- `vcmiextract.reader.MemoryReader`: little-endian reader over a byte buffer
  (`read_u8`, `read_u16`, `read_u32`, `read_bytes`, `read_name`, `seek`, ...).
- `vcmiextract.image.Image` and `ImageFormat`; `encode_png`, `save_png`,
  `drop_alpha_if_opaque`, `optimize_and_save`.
- `vcmiextract.pcx.load_image_pcx`: H3 PCX (8-bit palettized or 24-bit) and
  P32 images.
- `vcmiextract.dds.load_dds`: DXT1/DXT5 texture decoding.
- `vcmiextract.compression.decompress`: zlib inflation to a known size.
- `vcmiextract.output.save_file` and `save_image`.
- `vcmiextract.archives.extract_lod`, `extract_snd`, `extract_vid`.
- `vcmiextract.defs.extract_def` and `decode_frame`.
- `vcmiextract.hd.extract_pak`, `parse_sprite`, `SpriteEntry`.

## What it does not do

- `.pak` sprite metadata is parsed and checked, but sheets are not cut into
  individual sprites, and only the first sheet of each entry is written.
- Sounds and videos are copied out unchanged; there is no audio or video
  conversion.
- DDS textures other than single-surface DXT1 and DXT5 are rejected.

## Running the tests

```
pip install .[test]
pytest
```