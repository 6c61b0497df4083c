"""
Compression backends used to pack and unpack dump files.

Each compressor only builds shell command text; the commands run wherever the
owning endpoint runs them (remote session or local shell).
"""

from .models import ConfigurationError


class Compressor:
    """Base class for shell compressors."""

    name = ''
    file_extension = ''
    compress_program = ''
    decompress_program = ''

    def compress(self, source: str, destination: str) -> str:
        """Command compressing `source` ('-' for stdin) into `destination`."""
        return f"{self.compress_program} --best --stdout {source} > {destination}"

    def decompress(self, path: str) -> str:
        """Command decompressing `path` in place, dropping the extension."""
        return f"{self.decompress_program} {path}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class Gzip(Compressor):
    name = 'gzip'
    file_extension = 'gz'
    compress_program = 'gzip'
    decompress_program = 'gzip -d -f'


class Bzip2(Compressor):
    name = 'bzip2'
    file_extension = 'bz2'
    compress_program = 'bzip2'
    decompress_program = 'bunzip2 -f'


COMPRESSORS: dict[str, type[Compressor]] = {
    Gzip.name: Gzip,
    Bzip2.name: Bzip2,
}


def get_compressor(name) -> Compressor:
    """Resolve a compressor by its configured name."""
    key = str(name or '').strip().lower()
    if key not in COMPRESSORS:
        raise ConfigurationError(
            f"Unknown compressor '{name}'. Available: {', '.join(sorted(COMPRESSORS))}"
        )
    return COMPRESSORS[key]()
