# scripts/render_diagram.py
import argparse
import pathlib
import sys

from app_agents.architecture_agent import build_architecture_agent
from services.errors import classify_error
from services.pipeline import VisualizeSource, run_visualization
from services.utils import decode_data_url


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Draw a whiteboard architecture diagram for a GitHub repository.")
    parser.add_argument("repo_url", nargs="?", help="https://github.com/<user>/<repo>")
    parser.add_argument("--manual-file", help="read the documentation from this file instead of GitHub")
    parser.add_argument("-o", "--output", default="architecture.png")
    args = parser.parse_args(argv)

    if args.manual_file:
        source = VisualizeSource(mode="manual", manual_text=pathlib.Path(args.manual_file).read_text(encoding="utf-8"))
    elif args.repo_url:
        source = VisualizeSource(mode="url", repo_url=args.repo_url)
    else:
        parser.error("repo_url or --manual-file is required")

    try:
        result = run_visualization(source, build_architecture_agent())
    except Exception as e:
        info = classify_error(e)
        print(f"error ({info.kind}): {info.message}", file=sys.stderr)
        return 1

    out = pathlib.Path(args.output)
    out.write_bytes(decode_data_url(result.image_url))
    print("steps:", " -> ".join(s.value for s in result.steps))
    print("prompt:", result.prompt)
    print("written:", out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
