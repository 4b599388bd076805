#!/usr/bin/env python3
"""
FILE:  set_permissions.py

DESCRIPTION:  Gearman worker that handles the task of recursively setting the
    user/group ownership and file/directory permissions of a directory.

    Job payload (JSON):
        {
            "path": "/data/project",
            "user": "survey",
            "group": "survey",
            "filePermissions": "644",       (optional)
            "directoryPermissions": "755"   (optional)
        }

     BUGS:
    NOTES:
  VERSION:  1.0
  CREATED:  2026-10-19
 REVISION:  2026-10-19
"""

import argparse
import json
import logging
import os
import signal
import sys
import time
from os.path import dirname, realpath
import python3_gearman

sys.path.append(dirname(dirname(dirname(realpath(__file__)))))

from filepwn.lib.errors import FilePwnError
from filepwn.lib.filepwn import DEFAULT_CONFIG_FILE, FilePwn

TASKS = [
    {
        "name": "setOwnerGroupPermissions",
        "longName": "Setting Directory Ownership/Permissions",
    }
]

REQUIRED_KEYS = ['path', 'user', 'group']


class FilePwnGearmanWorker(python3_gearman.GearmanWorker):
    """
    Class for the current Gearman worker
    """

    def __init__(self, config_file = DEFAULT_CONFIG_FILE):
        self.stop = False
        self.filepwn = FilePwn(config_file)
        self.task = None

        super().__init__(host_list=[self.filepwn.get_gearman_server()])


    @staticmethod
    def _get_task(current_job):
        """
        Fetch task metadata
        """

        task = list(filter(lambda task: task['name'] == current_job.task, TASKS))
        return task[0] if len(task) > 0 else {"name": current_job.task, "longName": current_job.task}


    def on_job_execute(self, current_job):
        """
        Function run whenever a new job arrives
        """

        logging.debug("current_job: %s", current_job)

        self.stop = False
        self.task = self._get_task(current_job)
        logging.debug("task: %s", self.task)

        logging.info("Job: %s (%s) started at: %s", self.task['longName'], current_job.handle, time.strftime("%D %T", time.gmtime()))

        return super().on_job_execute(current_job)


    def on_job_exception(self, current_job, exc_info):
        """
        Function run whenever the current job has an exception
        """

        logging.error("Job: %s (%s) failed at: %s", self.task['longName'], current_job.handle, time.strftime("%D %T", time.gmtime()))

        self.send_job_data(current_job, json.dumps([{"partName": "Worker crashed", "result": "Fail", "reason": "Unknown"}]))

        exc_type, _, exc_tb = exc_info
        fname = os.path.split(exc_tb.tb_frame.f_code.co_filename)[1]
        logging.error("%s %s %s", exc_type, fname, exc_tb.tb_lineno)

        return super().on_job_exception(current_job, exc_info)


    def on_job_complete(self, current_job, job_result):
        """
        Function run whenever the current job completes
        """

        results_obj = json.loads(job_result)

        if len(results_obj['parts']) > 0 and results_obj['parts'][-1]['result'] == "Fail": # Final Verdict
            logging.warning("Job: %s failed: %s", self.task['longName'], results_obj['parts'][-1]['reason'])

        logging.debug("Job Results: %s", json.dumps(results_obj, indent=2))
        logging.info("Job: %s (%s) completed at: %s", self.task['longName'], current_job.handle, time.strftime("%D %T", time.gmtime()))

        return super().send_job_complete(current_job, job_result)


    def stop_task(self):
        """
        Function to stop the current job
        """

        self.stop = True
        logging.warning("Stopping current task...")


    def quit_worker(self):
        """
        Function to quit the worker
        """

        self.stop = True
        logging.warning("Quitting worker...")
        self.shutdown()


def task_set_owner_group_permissions(gearman_worker, gearman_job):
    """
    Set the ownership/permissions for the directory specified in the job
    payload
    """

    job_results = {'parts':[]}

    try:
        payload_obj = json.loads(gearman_job.data)
        if not isinstance(payload_obj, dict):
            raise ValueError("payload is not a JSON object")
    except ValueError as exc:
        logging.error("Unable to parse job payload: %s", str(exc))
        job_results['parts'].append({"partName": "Parse job payload", "result": "Fail", "reason": f"Invalid JSON payload: {exc}"})
        return json.dumps(job_results)

    logging.debug("Payload: %s", json.dumps(payload_obj, indent=2))

    missing_keys = [key for key in REQUIRED_KEYS if not payload_obj.get(key)]
    if len(missing_keys) > 0:
        logging.error("Job payload missing required key(s): %s", ', '.join(missing_keys))
        job_results['parts'].append({"partName": "Parse job payload", "result": "Fail", "reason": "Missing required key(s): " + ', '.join(missing_keys)})
        return json.dumps(job_results)

    job_results['parts'].append({"partName": "Parse job payload", "result": "Pass"})

    gearman_worker.send_job_status(gearman_job, 1, 10)

    if not os.path.isdir(payload_obj['path']):
        logging.error("Failed to find directory: %s", payload_obj['path'])
        job_results['parts'].append({"partName": "Verify directory exists", "result": "Fail", "reason": "Unable to locate the directory: " + payload_obj['path']})
        return json.dumps(job_results)

    job_results['parts'].append({"partName": "Verify directory exists", "result": "Pass"})

    gearman_worker.send_job_status(gearman_job, 2, 10)

    if gearman_worker.stop:
        logging.warning("Task stopped before setting ownership/permissions for %s", payload_obj['path'])
        job_results['parts'].append({"partName": "Set directory ownership/permissions", "result": "Fail", "reason": "Task stopped before any changes were made"})
        return json.dumps(job_results)

    logging.info("Set ownership/permissions for %s", payload_obj['path'])

    try:
        output_results = gearman_worker.filepwn.filepwn_directory(
            payload_obj['path'], payload_obj['user'], payload_obj['group'],
            payload_obj.get('filePermissions'), payload_obj.get('directoryPermissions')
        )
    except FilePwnError as exc:
        logging.error(str(exc))
        job_results['parts'].append({"partName": "Set directory ownership/permissions", "result": "Fail", "reason": str(exc)})
        return json.dumps(job_results)

    gearman_worker.send_job_status(gearman_job, 9, 10)

    if output_results['verdict']:
        job_results['parts'].append({"partName": "Set directory ownership/permissions", "result": "Pass"})
    else:
        job_results['parts'].append({"partName": "Set directory ownership/permissions", "result": "Fail", "reason": output_results['reason']})

    gearman_worker.send_job_status(gearman_job, 10, 10)

    return json.dumps(job_results)


# -------------------------------------------------------------------------------------
# Required python code for running the script as a stand-alone utility
# -------------------------------------------------------------------------------------
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Handle directory ownership/permissions related tasks')
    parser.add_argument('-c', '--config', dest='config_file',
                        default=DEFAULT_CONFIG_FILE,
                        help='filepwn configuration file')
    parser.add_argument('-v', '--verbosity', dest='verbosity',
                        default=0, action='count',
                        help='Increase output verbosity')

    parsed_args = parser.parse_args()

    ############################
    # Set up logging before we do any other argument parsing (so that we
    # can log problems with argument parsing).

    LOGGING_FORMAT = '%(asctime)-15s %(levelname)s - %(message)s'
    logging.basicConfig(format=LOGGING_FORMAT)

    LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO, 2: logging.DEBUG}
    parsed_args.verbosity = min(parsed_args.verbosity, max(LOG_LEVELS))
    logging.getLogger().setLevel(LOG_LEVELS[parsed_args.verbosity])

    logging.debug("Creating Worker...")

    new_worker = FilePwnGearmanWorker(parsed_args.config_file)
    new_worker.set_client_id(__file__)

    logging.debug("Defining Signal Handlers...")
    def sigquit_handler(_signo, _stack_frame):
        """
        Signal Handler for QUIT
        """

        logging.warning("QUIT Signal Received")
        new_worker.stop_task()

    def sigint_handler(_signo, _stack_frame):
        """
        Signal Handler for INT
        """

        logging.warning("INT Signal Received")
        new_worker.quit_worker()

    signal.signal(signal.SIGQUIT, sigquit_handler)
    signal.signal(signal.SIGINT, sigint_handler)

    logging.info("Registering worker tasks...")

    logging.info("\tTask: setOwnerGroupPermissions")
    new_worker.register_task("setOwnerGroupPermissions", task_set_owner_group_permissions)

    logging.info("Waiting for jobs...")
    new_worker.work()
