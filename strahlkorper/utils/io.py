import json
from pathlib import Path
from typing import Union

import numpy as np
import h5py

from ..core.base.exceptions import StrahlkorperError, StrahlkorperIOError, reraise_with_context
from ..core.surface import Strahlkorper

HDF5_SUFFIXES = ('.h5', '.hdf5')
JSON_SUFFIXES = ('.json',)


def save_strahlkorper(surface: Strahlkorper, output_path: Union[str, Path]) -> Path:
    """
    Save a surface to an HDF5 or JSON file, chosen by suffix.

    HDF5 files hold a ``strahlkorper`` group with ``center`` and
    ``coefficients`` datasets and the resolution and frame as attributes.

    Parameters
    ----------
    surface : Strahlkorper
        Surface to write
    output_path : str or Path
        Destination ending in .h5, .hdf5 or .json

    Returns
    -------
    Path
        The path written
    """
    output_path = Path(output_path)
    suffix = output_path.suffix.lower()
    if suffix not in HDF5_SUFFIXES + JSON_SUFFIXES:
        raise StrahlkorperIOError(f"Unsupported surface file format: {suffix}",
                                  file_path=str(output_path), operation="save")
    output_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        if suffix in JSON_SUFFIXES:
            with open(output_path, 'w', encoding='utf-8') as f:
                json.dump(surface.to_dict(), f, indent=2)
        else:
            with h5py.File(output_path, 'w') as f:
                group = f.create_group('strahlkorper')
                group.attrs['l_max'] = surface.l_max
                group.attrs['m_max'] = surface.m_max
                group.attrs['frame'] = surface.frame.value
                group.attrs['creation_date'] = str(np.datetime64('now'))
                group.create_dataset('center', data=np.asarray(surface.center))
                group.create_dataset('coefficients', data=surface.coefficients)
    except OSError as e:
        reraise_with_context(e, f"Failed to write {output_path}",
                             {'file_path': str(output_path), 'operation': 'save'},
                             error_type=StrahlkorperIOError)
    return output_path


def load_strahlkorper(file_path: Union[str, Path]) -> Strahlkorper:
    """
    Load a surface written by :func:`save_strahlkorper`.

    Parameters
    ----------
    file_path : str or Path
        Path to an .h5, .hdf5 or .json file

    Returns
    -------
    Strahlkorper
        The stored surface, bit-for-bit

    Raises
    ------
    StrahlkorperIOError
        If the file is missing, unreadable or not a surface file
    ValidationError
        If the stored fields do not form a valid surface; the error carries
        the file path in its details
    """
    file_path = Path(file_path)
    suffix = file_path.suffix.lower()
    if suffix not in HDF5_SUFFIXES + JSON_SUFFIXES:
        raise StrahlkorperIOError(f"Unsupported surface file format: {suffix}",
                                  file_path=str(file_path), operation="load")
    if not file_path.exists():
        raise StrahlkorperIOError(f"Surface file not found: {file_path}",
                                  file_path=str(file_path), operation="load")

    try:
        if suffix in JSON_SUFFIXES:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        else:
            with h5py.File(file_path, 'r') as f:
                if 'strahlkorper' not in f:
                    raise StrahlkorperIOError(f"No strahlkorper group in {file_path}",
                                              file_path=str(file_path), operation="load")
                group = f['strahlkorper']
                data = {
                    'l_max': int(group.attrs['l_max']),
                    'm_max': int(group.attrs['m_max']),
                    'frame': str(group.attrs['frame']),
                    'center': group['center'][()],
                    'coefficients': group['coefficients'][()],
                }
        return Strahlkorper.from_dict(data)
    except StrahlkorperIOError:
        raise
    except (OSError, KeyError, json.JSONDecodeError, StrahlkorperError) as e:
        reraise_with_context(e, f"Failed to read surface from {file_path}",
                             {'file_path': str(file_path), 'operation': 'load'},
                             error_type=StrahlkorperIOError)
