import argparse
import json
import logging
import sys
from pathlib import Path

from .config import configure_logging
from .contract import to_contract
from .loaders import load_section_dir
from .models import InvalidBatchError, SectionSource
from .pipeline import run_analysis

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Analyze Liquid section files and print the JSON report.")
    p.add_argument('paths', nargs='+',
                   help='Section files or directories of *.liquid files, in page order.')
    p.add_argument('--lcp', type=float, help='Measured largest contentful paint (ms).')
    p.add_argument('--cls', type=float, help='Measured cumulative layout shift.')
    p.add_argument('--tbt', type=float, help='Measured total blocking time (ms).')
    p.add_argument('--fcp', type=float, help='Measured first contentful paint (ms).')
    p.add_argument('--revenue', type=float, help='Monthly revenue used for impact estimates.')
    p.add_argument('--analyzed-at', help='Pin the report timestamp (ISO 8601).')
    p.add_argument('--out', help='Write the JSON report here instead of stdout.')
    p.add_argument('--log-level', help='Override THEMEMETRICS_LOG_LEVEL.')
    return p.parse_args(argv)


def collect_sources(paths):
    sources = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            sources.extend(load_section_dir(str(path)))
        elif path.is_file():
            sources.append(SectionSource(name=path.name, content=path.read_text(encoding='utf-8')))
        else:
            raise InvalidBatchError(f'no such file or directory: {raw}')
    return sources


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    lab = {k: getattr(args, k) for k in ('lcp', 'cls', 'tbt', 'fcp')}
    try:
        result = run_analysis(
            collect_sources(args.paths),
            lab_metrics=lab if any(v is not None for v in lab.values()) else None,
            monthly_revenue=args.revenue,
            analyzed_at=args.analyzed_at,
        )
    except InvalidBatchError as exc:
        print(f'Error: {exc}', file=sys.stderr)
        return 2

    payload = json.dumps(to_contract(result), indent=2, ensure_ascii=False)
    if args.out:
        Path(args.out).write_text(payload + '\n', encoding='utf-8')
        logger.info('wrote %s', args.out)
    else:
        print(payload)
    return 0


if __name__ == '__main__':
    sys.exit(main())
