"""Built-in CLI sub-commands for sdkgen.

* :mod:`~sdkgen.commands.inspect` -- list the resources, actions, enums,
  and recognised extension keys of a document.
* :mod:`~sdkgen.commands.shape` -- dump the structure a backend produces
  for a document.

Both are debugging surfaces over the library; neither renders files.
"""

from __future__ import annotations

from typing import Optional

import typer

from sdkgen.config import resolve_config
from sdkgen.exceptions import SdkgenError
from sdkgen.ir import Spec, build_spec
from sdkgen.output import debug, error
from sdkgen.parser import load_document


def load_spec(
    document: str, qa_mode: Optional[bool] = None, backend: Optional[str] = None
) -> Spec:
    """Resolve the config, then load *document* and build its IR.

    Library errors are reported on stderr and turned into a
    :class:`typer.Exit` carrying the error's exit code.
    """
    try:
        config = resolve_config(cli_qa_mode=qa_mode, cli_backend=backend)
        debug(f"Loading {document} (qa_mode={config.qa_mode})")
        return build_spec(load_document(document), config)
    except SdkgenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
