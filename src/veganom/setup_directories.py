"""
Directory setup for the anomaly pipeline.

Flat layout under one base directory:
- analysis/  NetCDF rasters and Parquet point series
- logs/      pipeline log files
"""

from pathlib import Path


def setup_output_directories(base_output_dir=None, verbose=True):
    """
    Set up the output directory structure.

    Parameters
    ----------
    base_output_dir : str or Path, optional
        Base output directory. If None, uses ./output in the current
        working directory.
    verbose : bool, optional
        Print the created paths.

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'analysis', 'logs'
    """
    if base_output_dir is None:
        base_output_dir = Path.cwd() / "output"

    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {
        "base": base_output_dir,
        "analysis": base_output_dir / "analysis",
        "logs": base_output_dir / "logs",
    }

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    if verbose:
        print("\nOutput directories created:")
        for key, path in directories.items():
            print(f"  {key:12s}: {path}")
        print("=" * 70 + "\n")

    return directories
