# reviewhound

reviewhound is a library for reporting linter and compiler findings where code
is reviewed. It posts them as reviews on Gerrit changes and as Code Insights
reports with annotations on Bitbucket Cloud and Bitbucket Server. It can also
print them as GitHub Actions annotations.

## Installation

```
pip install reviewhound
```

To run the test suite:

```
pip install "reviewhound[test]"
pytest
```

## Modules

- `reviewhound.models`: the data types. These are `Diagnostic` (with
  `Location`, `Range`, `Position`, `Code`, `Source`, `Suggestion` and
  `Severity`), `FilteredDiagnostic` and `Comment`. The module also defines the
  `CommentService`, `BulkCommentService` and `DiffService` protocols that the
  services implement.
- `reviewhound.commentutil`: helpers for comment bodies.
  - `markdown_comment` builds the Markdown body of a comment.
  - `get_code_fence_length` and `write_code_fence` size and write code fences.
  - `PostedComments` records comments already posted, by path and line.
- `reviewhound.serviceutil`: locates the git repository without running `git`.
  - `git_rel_workdir()` returns the working directory relative to the root of
    the git repository.
  - `find_git_root(path)` returns the root of the repository that contains
    `path`.
- `reviewhound.githubutils`: GitHub helpers.
  - `GitHubActionLogWriter` and `report_as_github_actions_log` print
    annotations as GitHub Actions logging commands.
  - `linked_markdown_diagnostic`, `path_link` and `basic_location_format` build
    Markdown links to source locations.
  - `is_in_github_action()` tells whether the code runs inside GitHub Actions.
- `reviewhound.gerrit`: the Gerrit services.
  - `GerritClient` is a small Gerrit REST client.
  - `ChangeDiff` is a diff service. It runs `git merge-base` and
    `git diff --find-renames` locally.
  - `ChangeReviewCommenter` posts every comment that lies in a diffed file as
    one review.
- `reviewhound.bitbucket`: Bitbucket Code Insights.
  - `annotator.ReportAnnotator` collects comments and drops duplicates. On
    `flush()` it creates one report per tool and posts that tool's annotations
    in batches of 100.
  - `cloud.CloudAPIClient` and `cloud.new_cloud_api_client` are the back end
    for Bitbucket Cloud. `new_cloud_api_client` can also route requests through
    the Pipelines proxy.
  - `server.ServerAPIClient` and `server.build_server_config` are the back end
    for Bitbucket Server.
  - `api` holds the request types and the `APIClient` protocol.
  - `payloads` holds the JSON bodies for both APIs.
- `reviewhound.resultmap`: `ResultMap` and `FilteredResultMap` are thread-safe
  maps of results from tools that run concurrently. The module also holds the
  `Result` and `FilteredResult` types.

## Examples

```python
from reviewhound.commentutil import get_code_fence_length
from reviewhound.bitbucket.api import report_id, report_title

get_code_fence_length("plain text")          # 3
get_code_fence_length("```\ncode\n```")       # 4: wraps triple backticks

report_id("Runner 1", "reviewhound")         # "runner_1-reviewhound"
report_title("golint", "reviewhound")        # "[golint] reviewhound report"
```

Comment services collect comments with `post(comment)`. Bulk services send
them all at once when `flush()` is called. For example, to report to Bitbucket
Server:

```python
from reviewhound.bitbucket.annotator import ReportAnnotator
from reviewhound.bitbucket.server import ServerAPIClient, build_server_config

config = build_server_config("https://bitbucket.example.com", "", "", "token")
annotator = ReportAnnotator(ServerAPIClient(config), "PROJ", "repo", "commit-sha", ["golint"])
for comment in comments:
    annotator.post(comment)
annotator.flush()
```

`ChangeDiff` runs `git` and needs it on `PATH`.

`ChangeDiff` and `ChangeReviewCommenter` call `git_rel_workdir()` when they are
created. They therefore have to be created inside a git repository.

## What it does not do

- It has no command-line program. It is a library only.
- It does not parse linter output or unified diffs.
- It does not decide which diagnostics fall inside a diff. The caller builds
  the `FilteredDiagnostic` values, including `in_diff_file`, `in_diff_context`
  and `source_lines`.
- It has no service that posts review comments on GitHub pull requests.
- It has no service for GitLab merge requests.