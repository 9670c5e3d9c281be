"""Pytest configuration and shared fixtures."""

import pytest

from hpc_admin.collectors.base import CollectorError, SchedulerQuery


JOB_XML_TEMPLATE = """<?xml version='1.0'?>
<detailed_job_info  xmlns:xsd="http://gridengine.sunsource.net/source/browse/*checkout*/gridengine/source/dist/util/resources/schemas/qstat/detailed_job_info.xsd?revision=1.11">
  <djob_info>
    <element>
      <JB_job_number>{job_id}</JB_job_number>
      <JB_job_name>run.sh</JB_job_name>
      <JB_owner>{owner}</JB_owner>
      <JB_group>users</JB_group>
      <JB_hard_resource_list>
{requests}
      </JB_hard_resource_list>
      <JB_soft_resource_list>
        <qstat_l_requests>
          <CE_name>h_rt</CE_name>
          <CE_valtype>3</CE_valtype>
          <CE_stringval>99999</CE_stringval>
        </qstat_l_requests>
      </JB_soft_resource_list>
    </element>
  </djob_info>
</detailed_job_info>
"""

REQUEST_TEMPLATE = """        <qstat_l_requests>
          <CE_name>{name}</CE_name>
          <CE_valtype>3</CE_valtype>
          <CE_stringval>{value}</CE_stringval>
          <CE_doubleval>0.000000</CE_doubleval>
          <CE_relop>0</CE_relop>
          <CE_consumable>0</CE_consumable>
          <CE_dominant>0</CE_dominant>
          <CE_pj_doubleval>0.000000</CE_pj_doubleval>
          <CE_pj_dominant>0</CE_pj_dominant>
          <CE_requestable>0</CE_requestable>
          <CE_tagged>0</CE_tagged>
        </qstat_l_requests>"""


def make_job_xml(job_id="9186455", owner="johndoe", requests=(("h_vmem", "2G"), ("h_rt", "3600"))):
    body = "\n".join(REQUEST_TEMPLATE.format(name=n, value=v) for n, v in requests)
    return JOB_XML_TEMPLATE.format(job_id=job_id, owner=owner, requests=body)


def make_user_jobs_xml(job_numbers):
    entries = "".join(
        f"""
    <job_list state="running">
      <JB_job_number>{n}</JB_job_number>
      <JAT_prio>0.50500</JAT_prio>
      <JB_name>run.sh</JB_name>
      <JB_owner>johndoe</JB_owner>
      <state>r</state>
      <JAT_start_time>2013-06-20T20:19:55</JAT_start_time>
      <queue_name>all.q@compute-0-1.local</queue_name>
      <slots>1</slots>
    </job_list>"""
        for n in job_numbers
    )
    return f"""<?xml version='1.0'?>
<job_info  xmlns:xsd="http://gridengine.sunsource.net/source/browse/*checkout*/gridengine/source/dist/util/resources/schemas/qstat/qstat.xsd?revision=1.11">
  <queue_info>{entries}
  </queue_info>
  <job_info>
  </job_info>
</job_info>
"""


UNKNOWN_JOB_XML = """<?xml version='1.0'?>
<unknown_jobs  xmlns:xsd="http://gridengine.sunsource.net/source/browse/*checkout*/gridengine/source/dist/util/resources/schemas/qstat/detailed_job_info.xsd?revision=1.11">
  <>
    <ST_name>999999</ST_name>
  </>
</unknown_jobs>
"""

RUNNING_TASKS_HEADER = """job-ID  prior   name       user         state submit/start at     queue                          slots ja-task-ID
-----------------------------------------------------------------------------------------------------------------
"""


class FakeScheduler(SchedulerQuery):
    """Canned SchedulerQuery that records every call."""

    def __init__(self, metadata=None, tasks=None, users=None, fail=()):
        self.metadata = metadata or {}
        self.tasks = tasks or {}
        self.users = users or {}
        self.fail = set(fail)
        self.calls = []
        self.messages = []

    def log(self, msg):
        self.messages.append(msg)

    def _check(self, key):
        if key in self.fail:
            raise CollectorError("gridengine", f"qstat failed for {key}")

    def job_metadata(self, job_id):
        self.calls.append(("job_metadata", job_id))
        self._check(job_id)
        return self.metadata.get(job_id, UNKNOWN_JOB_XML)

    def running_tasks(self, owner, job_id):
        self.calls.append(("running_tasks", owner, job_id))
        self._check(("tasks", job_id))
        return self.tasks.get(owner, "")

    def user_jobs(self, user):
        self.calls.append(("user_jobs", user))
        self._check(user)
        return self.users.get(user, make_user_jobs_xml([]))


@pytest.fixture
def sample_job_xml():
    """`qstat -j 9186455 -xml` for a job with h_rt=3600."""
    return make_job_xml()


@pytest.fixture
def sample_job_xml_no_runtime():
    return make_job_xml(job_id="500", owner="alice", requests=(("h_vmem", "4G"),))


@pytest.fixture
def sample_unknown_job_xml():
    return UNKNOWN_JOB_XML


@pytest.fixture
def sample_running_tasks():
    """`qstat -u johndoe -s r` with an array job, a single job and a stray line."""
    return RUNNING_TASKS_HEADER + (
        "9186455 0.50500 run.sh     johndoe      r     06/20/2013 20:19:55 all.q@compute-0-1.local            1 1\n"
        "9186455 0.50500 run.sh     johndoe      r     06/20/2013 20:25:10 all.q@compute-0-2.local            1 2\n"
        "91864550 0.50500 other.sh  johndoe      r     06/20/2013 20:30:00 all.q@compute-0-3.local            1\n"
        "500     0.50500 single.sh  johndoe      r     06/21/2013 08:00:00 all.q@compute-0-4.local            4\n"
    )


@pytest.fixture
def sample_user_jobs_single():
    return make_user_jobs_xml(["9186455"])


@pytest.fixture
def sample_user_jobs_multi():
    return make_user_jobs_xml(["9186455", "9186455", "9186460"])


@pytest.fixture
def sample_user_jobs_empty():
    return make_user_jobs_xml([])


@pytest.fixture
def fake_scheduler_cls():
    return FakeScheduler


@pytest.fixture
def make_job_xml_fn():
    return make_job_xml


@pytest.fixture
def make_user_jobs_xml_fn():
    return make_user_jobs_xml


@pytest.fixture
def sample_dell_html():
    """Trimmed Dell support troubleshooting page."""
    return """
    <html>
    <body>
      <div id="warrantyInfo">
        <div class="warrantDescription">
            PowerEdge R610\r\n
        </div>
        <ul class="warrantyList">
          <li class="TopTwoWarrantyListItem"><b>[412]</b> days left - Gold Support</li>
          <li class="TopTwoWarrantyListItem"><b>[17]</b> days left - NBD Onsite</li>
        </ul>
      </div>
    </body>
    </html>
    """
