def test_config_redacts_api_key(api_client):
    response = api_client.get("/config")
    assert response.status_code == 200
    data = response.json()
    assert data["dify_api_key"] == "***"
    assert data["dify_workflow_id"] == "wf-123"
    assert data["upload_dir"].endswith("uploads")
