"""CLI Commands"""

import os
import sys
from dataclasses import asdict

from gitdraft.config import Config, get_config_path, get_env_overrides
from gitdraft.output import Style


def display_config(config: Config, style: Style) -> int:
    """Display current configuration."""
    config_path = get_config_path()

    print(f"\n{style.bold('Current Configuration')}\n")

    if config_path:
        print(f"  {style.dim('Loaded from:')} {config_path}")
    else:
        print(f"  {style.dim('Loaded from:')} defaults (no .gitdraftrc found)")

    overrides = get_env_overrides()
    if overrides:
        print(f"  {style.dim('Environment overrides:')}")
        for var in overrides:
            print(f"    {var}={os.environ.get(var, '')}")

    print()
    print(f"  {style.bold('Settings:')}")
    settings = asdict(config)
    width = max(len(key) for key in settings)
    for key, value in settings.items():
        if value is None:
            shown = 'auto' if key.endswith('model') else '-'
        elif isinstance(value, bool):
            shown = str(value).lower()
        else:
            shown = str(value)
        print(f"    {key + ':':<{width + 1}}  {style.info(shown)}")

    print(f"\n  {style.dim('Config locations:')}")
    print("    Local:  .gitdraftrc (in current directory)")
    print("    Global: ~/.gitdraftrc\n")

    return 0


def run_install_completion(style: Style) -> int:
    """Install shell tab completion."""
    shell = os.environ.get('SHELL', '')
    eval_line = 'eval "$(register-python-argcomplete gitdraft)"'
    powershell = "register-python-argcomplete --shell powershell gitdraft | Out-String | Invoke-Expression"

    print(f"\n{style.bold('Tab Completion Setup')}\n")

    if 'zsh' in shell or 'bash' in shell:
        rc_file = '~/.zshrc' if 'zsh' in shell else '~/.bashrc'
        print(f"Add this line to {style.dim(os.path.expanduser(rc_file))}:\n")
        print(f"  {eval_line}\n")
        print(f"Then run: {style.dim('source ' + rc_file)}")
    elif sys.platform == 'win32':
        print("For PowerShell, run:\n")
        print(f"  {powershell}\n")
        print("To make it permanent, add it to your $PROFILE.")
    else:
        print("Run one of these based on your shell:\n")
        print(f"  {style.dim('# Bash/Zsh')}")
        print(f"  {eval_line}\n")
        print(f"  {style.dim('# PowerShell')}")
        print(f"  {powershell}\n")
        print(f"  {style.dim('# Fish')}")
        print("  register-python-argcomplete --shell fish gitdraft | source")

    print(f"\n{style.dim('After setup, press TAB to autocomplete commands and flags.')}")
    return 0
