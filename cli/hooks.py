"""Shell hook scripts that reload variables on directory change."""

import shlex

BASH_HOOK = """\
# varset shell hook
__varset_prompt_command() {{
  local current_dir="$PWD"
  if [ -z "$__varset_last_dir" ] || [ "$__varset_last_dir" != "$current_dir" ]; then
    __varset_last_dir="$current_dir"
    eval "$({executable} reload)"
  fi
}}

if [[ ":$PROMPT_COMMAND:" != *":__varset_prompt_command:"* ]]; then
  PROMPT_COMMAND="__varset_prompt_command${{PROMPT_COMMAND:+;$PROMPT_COMMAND}}"
fi"""

ZSH_HOOK = """\
# varset shell hook
__varset_precmd() {{
  local current_dir="$PWD"
  if [ -z "$__varset_last_dir" ] || [ "$__varset_last_dir" != "$current_dir" ]; then
    __varset_last_dir="$current_dir"
    eval "$({executable} reload)"
  fi
}}

if [[ ${{precmd_functions[(I)__varset_precmd]}} -eq 0 ]]; then
  precmd_functions=(__varset_precmd $precmd_functions)
fi"""

FISH_HOOK = """\
# varset shell hook
function __varset_on_variable_pwd --on-variable PWD
  {executable} reload | source
end"""

HOOKS = {
    "bash": BASH_HOOK,
    "zsh": ZSH_HOOK,
    "fish": FISH_HOOK,
}


def generate_hook(shell: str, executable: str) -> str:
    """
    Generate the hook script for a shell.

    Args:
        shell: One of bash, zsh, fish
        executable: Path of the varset executable

    Returns:
        Hook script text

    Raises:
        KeyError: If the shell is not supported
    """
    return HOOKS[shell].format(executable=shlex.quote(executable))
