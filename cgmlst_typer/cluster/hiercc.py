"""Reading pHierCC's per-genome HC level table.

pHierCC writes ``<prefix>.HierCC.gz`` with a header ``#ST_id HC0 HC1 ...``
and one row per genome giving its cluster id at every allelic distance.
"""

import gzip
import shutil
from pathlib import Path
from typing import Dict, Iterable

from cgmlst_typer.errors import ClusterStageError


def hc_label(level) -> str:
    return f'HC{int(level)}'


def decompress_hiercc(gz_file, output_file=None) -> Path:
    """Gunzip ``cluster.HierCC.gz`` beside itself (or to ``output_file``)."""
    gz_file = Path(gz_file)
    if output_file is None:
        output_file = gz_file.with_suffix('')
    output_file = Path(output_file)
    try:
        with gzip.open(gz_file, 'rb') as fin, open(output_file, 'wb') as fout:
            shutil.copyfileobj(fin, fout)
    except (OSError, EOFError) as e:
        raise ClusterStageError(f"Cannot decompress {gz_file}: {e}") from e
    return output_file


def read_hiercc_row(hiercc_file, genome_id: str) -> Dict[str, str]:
    """Find the row for ``genome_id`` and zip it with the header.

    Returns:
        dict: HC label -> raw cluster value, identifier column excluded

    Raises:
        ClusterStageError: If the table has no header or no row for ``genome_id``
    """
    hiercc_file = Path(hiercc_file)
    opener = gzip.open if hiercc_file.suffix == '.gz' else open
    try:
        with opener(hiercc_file, 'rt') as fh:
            header = fh.readline().rstrip('\r\n')
            keys = header.split('\t')[1:]
            row = None
            for line in fh:
                cols = line.rstrip('\r\n').split('\t')
                if cols[0] == genome_id:
                    row = dict(zip(keys, cols[1:]))
                    break
    except (OSError, EOFError, UnicodeDecodeError) as e:
        raise ClusterStageError(f"Cannot read HierCC table {hiercc_file}: {e}") from e
    if not header:
        raise ClusterStageError(f"HierCC table {hiercc_file} is empty")
    if row is None:
        raise ClusterStageError(f"Could not find {genome_id} row in {hiercc_file}")
    return row


def select_levels(row: Dict[str, str], levels: Iterable[int]) -> Dict[str, int]:
    """Keep only the allowed HC levels, as integers, ordered by distance."""
    selected = {}
    for level in sorted(set(int(lv) for lv in levels)):
        label = hc_label(level)
        if label not in row:
            continue
        try:
            selected[label] = int(row[label])
        except ValueError as e:
            raise ClusterStageError(f"Non-integer cluster id {row[label]!r} at {label}") from e
    if not selected:
        raise ClusterStageError(f"None of the requested HC levels are present (have {list(row)[:5]}...)")
    return selected


__all__ = ['hc_label', 'decompress_hiercc', 'read_hiercc_row', 'select_levels']
